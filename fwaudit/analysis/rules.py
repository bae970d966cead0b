"""Rule catalog: structural expectations per entity kind.

Each kind is described by a KindRule row; the _check_* helpers turn a row plus
a parsed class into issues. Every check runs independently.
"""

import re
from dataclasses import dataclass

from fwaudit.analysis.models import FileKind, Issue, Severity
from fwaudit.analysis.syntax import ClassInfo, SyntaxSummary

HTTP_VERB_DECORATORS = frozenset({"Get", "Post", "Put", "Delete", "Patch", "Options", "Head", "All"})
NON_PUBLIC = frozenset({"private", "protected"})

LIFECYCLE_HOOKS = {
    "ngOnInit": "OnInit",
    "ngOnDestroy": "OnDestroy",
    "ngOnChanges": "OnChanges",
    "ngAfterViewInit": "AfterViewInit",
}

COMMENTED_CODE_RE = re.compile(r"^\s*//.*[;{}]")

STYLE_URLS = {
    "angular": {
        "unused-import": "https://angular.io/guide/styleguide#style-04-13",
        "commented-code": "https://angular.io/guide/styleguide#style-02-03",
    },
    "nestjs": {
        "unused-import": "https://docs.nestjs.com/styleguide",
        "commented-code": "https://docs.nestjs.com/styleguide",
    },
}

ANGULAR_IMPORT_HINT = "\n\n// Don't forget to add the import:\n// import {{ {symbols} }} from '@angular/core';"


@dataclass(frozen=True)
class Capability:
    """An interface the class must declare, and optionally the method it must define."""

    interface: str
    interface_url: str
    label: str
    method: str | None = None
    method_url: str = ""
    method_fix: str = ""
    name_markers: tuple[str, ...] = ()

    def applies_to(self, class_name: str) -> bool:
        return not self.name_markers or any(m in class_name for m in self.name_markers)


@dataclass(frozen=True)
class KindRule:
    kind: FileKind
    label: str
    decorator: str
    decorator_url: str
    decorator_fix: str
    capabilities: tuple[Capability, ...] = ()
    naming_suffixes: tuple[str, ...] = ()
    naming_url: str = "https://docs.nestjs.com/styleguide#naming"
    required_key: str | None = None
    required_key_url: str = ""
    check_http_verbs: bool = False
    check_constructor_modifiers: bool = False
    check_lifecycle_hooks: bool = False
    import_hint: str = ""


PIPE_TRANSFORM = Capability(
    interface="PipeTransform",
    interface_url="https://docs.nestjs.com/pipes",
    label="Pipe",
    method="transform",
    method_url="https://docs.nestjs.com/pipes#building-a-simple-pipe",
    method_fix=(
        "transform(value: any, metadata: ArgumentMetadata) {\n"
        "  // transformation logic\n"
        "  return value;\n"
        "}"
    ),
)

CAN_ACTIVATE = Capability(
    interface="CanActivate",
    interface_url="https://docs.nestjs.com/guards",
    label="Guard",
    method="canActivate",
    method_url="https://docs.nestjs.com/guards#basic-guard",
    method_fix=(
        "canActivate(context: ExecutionContext): boolean | Promise<boolean> | Observable<boolean> {\n"
        "  // guard logic\n"
        "  return true;\n"
        "}"
    ),
)

EXCEPTION_FILTER = Capability(
    interface="ExceptionFilter",
    interface_url="https://docs.nestjs.com/exception-filters",
    label="Exception filter",
    method="catch",
    method_url="https://docs.nestjs.com/exception-filters#binding-filters",
    method_fix="catch(exception: Error, host: ArgumentsHost) {\n  // filter logic\n}",
    name_markers=("Filter", "Exception"),
)

NEST_INTERCEPTOR = Capability(
    interface="NestInterceptor",
    interface_url="https://docs.nestjs.com/interceptors",
    label="Interceptor",
    method="intercept",
    method_url="https://docs.nestjs.com/interceptors#basics",
    method_fix=(
        "intercept(context: ExecutionContext, next: CallHandler): Observable<any> {\n"
        "  // interceptor logic\n"
        "  return next.handle();\n"
        "}"
    ),
)

NEST_MIDDLEWARE = Capability(
    interface="NestMiddleware",
    interface_url="https://docs.nestjs.com/middleware",
    label="Middleware",
    method="use",
    method_url="https://docs.nestjs.com/middleware",
    method_fix="use(req: Request, res: Response, next: NextFunction) {\n  next();\n}",
)

ANGULAR_PIPE_TRANSFORM = Capability(
    interface="PipeTransform",
    interface_url="https://angular.io/guide/pipes#creating-pipes-for-custom-data-transformations",
    label="Pipe",
)


INJECTABLE_FIX = "Add @Injectable() decorator to the class:\n\n@Injectable()\n{text}"


RULES: dict[FileKind, KindRule] = {
    rule.kind: rule
    for rule in (
        KindRule(
            kind=FileKind.NESTJS_CONTROLLER,
            label="controller",
            decorator="Controller",
            decorator_url="https://docs.nestjs.com/controllers",
            decorator_fix="Add @Controller() decorator to the class:\n\n@Controller()\n{text}",
            check_http_verbs=True,
            check_constructor_modifiers=True,
        ),
        KindRule(
            kind=FileKind.NESTJS_SERVICE,
            label="service",
            decorator="Injectable",
            decorator_url="https://docs.nestjs.com/providers",
            decorator_fix=INJECTABLE_FIX,
            naming_suffixes=("Service", "Provider", "Repository"),
        ),
        KindRule(
            kind=FileKind.NESTJS_MODULE,
            label="module",
            decorator="Module",
            decorator_url="https://docs.nestjs.com/modules",
            decorator_fix=(
                "Add @Module decorator with required metadata to the class:\n\n"
                "@Module({{\n  imports: [],\n  controllers: [],\n  providers: [],\n  exports: []\n}})\n{text}"
            ),
            naming_suffixes=("Module",),
        ),
        KindRule(
            kind=FileKind.NESTJS_MIDDLEWARE,
            label="middleware",
            decorator="Injectable",
            decorator_url="https://docs.nestjs.com/middleware",
            decorator_fix=INJECTABLE_FIX,
            capabilities=(NEST_MIDDLEWARE,),
        ),
        KindRule(
            kind=FileKind.NESTJS_PIPE,
            label="pipe",
            decorator="Injectable",
            decorator_url="https://docs.nestjs.com/pipes",
            decorator_fix=INJECTABLE_FIX,
            capabilities=(PIPE_TRANSFORM,),
        ),
        KindRule(
            kind=FileKind.NESTJS_GUARD,
            label="guard",
            decorator="Injectable",
            decorator_url="https://docs.nestjs.com/guards",
            decorator_fix=INJECTABLE_FIX,
            capabilities=(CAN_ACTIVATE,),
        ),
        KindRule(
            kind=FileKind.NESTJS_INTERCEPTOR,
            label="interceptor",
            decorator="Injectable",
            decorator_url="https://docs.nestjs.com/interceptors",
            decorator_fix=INJECTABLE_FIX,
            capabilities=(EXCEPTION_FILTER, NEST_INTERCEPTOR),
        ),
        KindRule(
            kind=FileKind.ANGULAR_COMPONENT,
            label="component",
            decorator="Component",
            decorator_url="https://angular.io/api/core/Component",
            decorator_fix=(
                "Add @Component() decorator with required metadata to the class:\n\n"
                "@Component({{\n  selector: 'app-{lower}',\n  templateUrl: './{lower}.component.html'\n}})\n{text}"
            ),
            check_lifecycle_hooks=True,
        ),
        KindRule(
            kind=FileKind.ANGULAR_SERVICE,
            label="service",
            decorator="Injectable",
            decorator_url="https://angular.io/guide/dependency-injection",
            decorator_fix=(
                "Add @Injectable() decorator to the class:\n\n@Injectable({{ providedIn: 'root' }})\n{text}"
            ),
            import_hint="Injectable",
            required_key="providedIn",
            required_key_url="https://angular.io/guide/dependency-injection-providers#tree-shakable-providers",
        ),
        KindRule(
            kind=FileKind.ANGULAR_MODULE,
            label="module",
            decorator="NgModule",
            decorator_url="https://angular.io/guide/ngmodules",
            decorator_fix=(
                "Add @NgModule decorator with required metadata to the class:\n\n"
                "@NgModule({{\n  declarations: [],\n  imports: [],\n  exports: [],\n  providers: []\n}})\n{text}"
            ),
            import_hint="NgModule",
        ),
        KindRule(
            kind=FileKind.ANGULAR_DIRECTIVE,
            label="directive",
            decorator="Directive",
            decorator_url="https://angular.io/guide/attribute-directives",
            decorator_fix=(
                "Add @Directive decorator with required metadata to the class:\n\n"
                "@Directive({{\n  selector: '[app{name}]'\n}})\n{text}"
            ),
            import_hint="Directive",
            check_lifecycle_hooks=True,
        ),
        KindRule(
            kind=FileKind.ANGULAR_PIPE,
            label="pipe",
            decorator="Pipe",
            decorator_url="https://angular.io/guide/pipes",
            decorator_fix=(
                "Add @Pipe decorator with required metadata to the class:\n\n"
                "@Pipe({{\n  name: '{lower}'\n}})\n{text}"
            ),
            import_hint="Pipe, PipeTransform",
            capabilities=(ANGULAR_PIPE_TRANSFORM,),
        ),
    )
}


def _class_issue(cls: ClassInfo, issue_id: str, description: str, severity: Severity,
                 fix: str, url: str) -> Issue:
    return Issue(
        id=issue_id,
        description=description,
        severity=severity,
        line_start=cls.line_start,
        line_end=cls.line_end,
        suggested_fix=fix,
        documentation_url=url,
    )


def _check_decorator(rule: KindRule, cls: ClassInfo) -> list[Issue]:
    if cls.decorator(rule.decorator) is not None:
        return []
    fix = rule.decorator_fix.format(text=cls.text, name=cls.name, lower=cls.name.lower())
    if rule.import_hint:
        fix += ANGULAR_IMPORT_HINT.format(symbols=rule.import_hint)
    return [_class_issue(
        cls,
        f"missing-{rule.decorator.lower()}-decorator-{cls.name}",
        f"Missing @{rule.decorator} decorator on {rule.label} class",
        Severity.ERROR,
        fix,
        rule.decorator_url,
    )]


def _check_capabilities(rule: KindRule, cls: ClassInfo) -> list[Issue]:
    # first applicable capability wins for interceptor-kind classes
    capability = next((c for c in rule.capabilities if c.applies_to(cls.name)), None)
    if capability is None:
        return []

    issues = []
    if not cls.implements_any(capability.interface):
        issues.append(_class_issue(
            cls,
            f"missing-{capability.interface.lower()}-interface-{cls.name}",
            f"{capability.label} class should implement {capability.interface} interface",
            Severity.ERROR,
            f"Update class to implement {capability.interface} interface:\n\n"
            f"export class {cls.name} implements {capability.interface} {{...}}",
            capability.interface_url,
        ))
    if capability.method and not cls.has_method(capability.method):
        article = "an" if capability.method[0] in "aeiou" else "a"
        issues.append(_class_issue(
            cls,
            f"missing-{capability.method.lower()}-method-{cls.name}",
            f"{capability.label} class must implement {article} {capability.method} method",
            Severity.ERROR,
            f"Add {capability.method} method to {capability.label.lower()} class:\n\n{capability.method_fix}",
            capability.method_url,
        ))
    return issues


def _check_naming(rule: KindRule, cls: ClassInfo) -> list[Issue]:
    if not rule.naming_suffixes or cls.name == "unknown":
        return []
    if cls.name.endswith(rule.naming_suffixes):
        return []
    suffix = rule.naming_suffixes[0]
    return [_class_issue(
        cls,
        f"{rule.label}-naming-convention-{cls.name}",
        f"{rule.label.capitalize()} class name should end with '{suffix}': {cls.name}",
        Severity.INFO,
        f"Rename the class to follow the naming convention:\n\nexport class {cls.name}{suffix} {{...}}",
        rule.naming_url,
    )]


def _check_required_key(rule: KindRule, cls: ClassInfo) -> list[Issue]:
    if not rule.required_key:
        return []
    decorator = cls.decorator(rule.decorator)
    if decorator is None or rule.required_key in decorator.arguments:
        return []
    return [Issue(
        id=f"missing-{rule.required_key.lower()}-{cls.name}",
        description=f"{rule.decorator} decorator should use {rule.required_key} for tree-shakable services",
        severity=Severity.WARNING,
        line_start=decorator.line_start,
        line_end=decorator.line_end,
        suggested_fix=f"Update {rule.decorator} decorator to use {rule.required_key}:\n\n"
                      f"@{rule.decorator}({{ {rule.required_key}: 'root' }})",
        documentation_url=rule.required_key_url,
    )]


def _check_http_verbs(rule: KindRule, cls: ClassInfo) -> list[Issue]:
    if not rule.check_http_verbs:
        return []
    issues = []
    for method in cls.methods:
        if method.accessibility in NON_PUBLIC or method.is_static:
            continue
        if any(d.name in HTTP_VERB_DECORATORS for d in method.decorators):
            continue
        issues.append(Issue(
            id=f"missing-http-method-decorator-{method.name}",
            description=f"Missing HTTP method decorator on controller method {method.name}",
            severity=Severity.WARNING,
            line_start=method.line_start,
            line_end=method.line_end,
            suggested_fix=f"Add an appropriate HTTP method decorator to the method:\n\n@Get()\n{method.name}() {{...}}",
            documentation_url="https://docs.nestjs.com/controllers#request-object",
        ))
    return issues


def _check_constructor_modifiers(rule: KindRule, cls: ClassInfo) -> list[Issue]:
    if not rule.check_constructor_modifiers:
        return []
    return [
        Issue(
            id=f"missing-access-modifier-{param.name}",
            description=f"Missing access modifier in constructor parameter for dependency injection: {param.name}",
            severity=Severity.WARNING,
            line_start=param.line_start,
            line_end=param.line_end,
            suggested_fix="Add an access modifier (private, protected, or public) to the parameter:\n\n"
                          f"constructor(private {param.text}) {{}}",
            documentation_url="https://docs.nestjs.com/providers#dependency-injection",
        )
        for param in cls.constructor_parameters
        if param.accessibility is None
    ]


def _check_lifecycle_hooks(rule: KindRule, cls: ClassInfo) -> list[Issue]:
    if not rule.check_lifecycle_hooks:
        return []
    issues = []
    for hook, interface in LIFECYCLE_HOOKS.items():
        if not cls.has_method(hook) or cls.implements_any(interface):
            continue
        issues.append(Issue(
            id=f"missing-{interface.lower()}-interface-{cls.name}",
            description=f"{rule.label.capitalize()} has {hook} method but does not implement {interface} interface",
            severity=Severity.WARNING,
            line_start=cls.line_start,
            line_end=cls.line_start + 1,
            suggested_fix=f"Update class declaration to implement {interface}:\n\n"
                          f"export class {cls.name} implements {interface} {{"
                          + ANGULAR_IMPORT_HINT.format(symbols=interface),
            documentation_url=f"https://angular.io/api/core/{interface}",
        ))
    return issues


CLASS_CHECKS = (
    _check_decorator,
    _check_capabilities,
    _check_naming,
    _check_required_key,
    _check_http_verbs,
    _check_constructor_modifiers,
    _check_lifecycle_hooks,
)


def check_classes(kind: FileKind, summary: SyntaxSummary) -> list[Issue]:
    """Run the kind's checklist over every class in the file."""
    rule = RULES.get(kind)
    if rule is None:
        return []
    issues = []
    for cls in summary.classes:
        # a framework base class supplies the interface and its methods
        inherited = summary.framework_base(cls) is not None
        for check in CLASS_CHECKS:
            if inherited and check is _check_capabilities:
                continue
            issues.extend(check(rule, cls))
    return issues


def check_common(summary: SyntaxSummary, framework: str) -> list[Issue]:
    """Framework-agnostic checks: unused imports and commented-out code."""
    urls = STYLE_URLS.get(framework, STYLE_URLS["nestjs"])
    issues = []
    for binding in summary.imports:
        if summary.identifier_counts.get(binding.local_name, 0) > 1:
            continue
        issues.append(Issue(
            id=f"unused-import-{binding.local_name}",
            description=f"Unused import: {binding.local_name}",
            severity=Severity.WARNING,
            line_start=binding.line_start,
            line_end=binding.line_end,
            suggested_fix=f"Remove the unused import: {binding.describe()}",
            documentation_url=urls["unused-import"],
        ))

    for comment in summary.comments:
        if not COMMENTED_CODE_RE.match(comment.text):
            continue
        issues.append(Issue(
            id=f"commented-code-{comment.line_start}",
            description="Commented out code should be removed",
            severity=Severity.INFO,
            line_start=comment.line_start,
            line_end=comment.line_end,
            suggested_fix="Remove commented out code",
            documentation_url=urls["commented-code"],
        ))
    return issues
