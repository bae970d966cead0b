"""Tests for file classification."""

import pytest

from fwaudit.analysis.classifier import classify, classify_by_content, detect_language, framework_of, framework_order
from fwaudit.analysis.models import CodeFile, FileKind, Language


@pytest.mark.parametrize(
    "path, expected",
    [
        ("src/a.ts", Language.TYPESCRIPT),
        ("src/a.JS", Language.JAVASCRIPT),
        ("src/a.component.html", Language.HTML),
        ("styles.scss", Language.SCSS),
        ("angular.json", Language.JSON),
        ("ci.yml", Language.YAML),
        ("README.md", Language.UNKNOWN),
    ],
)
def test_detect_language(path, expected):
    assert detect_language(path) == expected


class TestPathRules:
    """Filename fragments decide the kind before content is looked at."""

    def test_nestjs_controller(self):
        file = classify(CodeFile("src/widget.controller.ts", "export class WidgetController {}"), "nestjs")
        assert file.kind is FileKind.NESTJS_CONTROLLER
        assert file.language is Language.TYPESCRIPT

    def test_framework_hint_breaks_ties(self):
        """'.service.' exists for both frameworks; the hint picks the table."""
        path = "src/data.service.ts"
        assert classify(CodeFile(path, ""), "angular").kind is FileKind.ANGULAR_SERVICE
        assert classify(CodeFile(path, ""), "nestjs").kind is FileKind.NESTJS_SERVICE

    def test_import_origin_breaks_ties(self):
        content = "import { Injectable } from '@angular/core';\n@Injectable()\nexport class DataService {}"
        assert classify(CodeFile("src/data.service.ts", content)).kind is FileKind.ANGULAR_SERVICE

    def test_default_order_prefers_nestjs(self):
        assert classify(CodeFile("src/app.module.ts", "")).kind is FileKind.NESTJS_MODULE

    def test_test_files_win(self):
        assert classify(CodeFile("src/cats.controller.spec.ts", "@Controller()")).kind is FileKind.TEST

    def test_configuration(self):
        assert classify(CodeFile("jest.config.js", "")).kind is FileKind.CONFIGURATION

    def test_provider_and_filter_aliases(self):
        assert classify(CodeFile("users.repository.ts", ""), "nestjs").kind is FileKind.NESTJS_SERVICE
        assert classify(CodeFile("http.filter.ts", ""), "nestjs").kind is FileKind.NESTJS_INTERCEPTOR


class TestContentRules:
    """Decorator markers when the filename says nothing."""

    def test_controller_marker(self):
        assert classify_by_content("@Controller('cats')\nexport class Cats {}") is FileKind.NESTJS_CONTROLLER

    def test_injectable_needs_a_name_hint_for_nestjs(self):
        content = "import { Injectable } from '@nestjs/common';\n@Injectable()\nexport class AuthGuard {}"
        assert classify_by_content(content, framework_order(content)) is FileKind.NESTJS_GUARD

    def test_angular_injectable_is_not_a_nestjs_service(self):
        content = "import { Injectable } from '@angular/core';\n@Injectable()\nexport class DataService {}"
        assert classify_by_content(content) is FileKind.ANGULAR_SERVICE

    def test_angular_markers(self):
        assert classify_by_content("@Component({})\nexport class A {}") is FileKind.ANGULAR_COMPONENT
        assert classify_by_content("@NgModule({})\nexport class A {}") is FileKind.ANGULAR_MODULE
        assert classify_by_content("@Directive({})\nexport class A {}") is FileKind.ANGULAR_DIRECTIVE

    def test_no_marker(self):
        assert classify(CodeFile("src/util.ts", "export const x = 1;")).kind is FileKind.UNKNOWN

    def test_non_code_languages_stay_unknown(self):
        assert classify(CodeFile("src/app.component.html", "<div></div>")).kind is FileKind.UNKNOWN


class TestClassifyContract:
    """Idempotence and framework reporting."""

    def test_idempotent(self):
        once = classify(CodeFile("src/cats.controller.ts", ""))
        assert classify(once, "angular") is once

    def test_framework_of(self):
        assert framework_of(classify(CodeFile("a.component.ts", ""))) == "angular"
        assert framework_of(classify(CodeFile("a.spec.ts", "import { Test } from '@nestjs/testing';"))) == "nestjs"
        assert framework_of(classify(CodeFile("README.md", "# hi"))) == "unknown"

    def test_kind_properties(self):
        assert FileKind.NESTJS_CONTROLLER.framework == "nestjs"
        assert FileKind.NESTJS_CONTROLLER.component == "controller"
        assert FileKind.TEST.framework is None
        assert FileKind.TEST.component is None
