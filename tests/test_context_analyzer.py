"""
Tests for the Context Analyzer — providers, lookups and provider/consumer links.
"""

from widgetlens.core.context_analyzer import ContextAnalyzer
from widgetlens.core.lexer import tokenize
from widgetlens.core.parser import parse
from widgetlens.core.widget_analyzer import WidgetAnalyzer
from widgetlens.models.context_models import ProviderKind, UsagePattern
from widgetlens.models.issue_models import Severity


def _analyze(source):
    tokens, _ = tokenize(source)
    program, _ = parse(tokens)
    widgets = WidgetAnalyzer(program).analyze()
    return ContextAnalyzer(program, widgets).analyze()


def test_providers(provider_source):
    result = _analyze(provider_source)
    providers = {p.name: p for p in result.providers}
    assert list(providers) == ["CartModel", "ThemeScope", "ChangeNotifierProvider<CartModel>"]

    cart = providers["CartModel"]
    assert cart.provider_kind == ProviderKind.CHANGE_NOTIFIER
    assert cart.notifying_methods == ["add"]
    assert cart.provided_by == ["App"]

    scope = providers["ThemeScope"]
    assert scope.provider_kind == ProviderKind.INHERITED_WIDGET
    assert scope.has_of_accessor
    assert scope.notifies_on_change

    instance = providers["ChangeNotifierProvider<CartModel>"]
    assert instance.provider_kind == ProviderKind.PROVIDER
    assert instance.value_type == "CartModel"
    assert instance.provided_by == ["App"]
    assert result.issues == []


def test_usages(provider_source):
    result = _analyze(provider_source)
    usages = [(u.pattern, u.widget, u.lookup_type, u.ssr_safe) for u in result.usages]
    assert usages == [
        (UsagePattern.NOTIFY_LISTENERS, "CartModel", None, False),
        (UsagePattern.PROVIDER_WATCH, "CartBadge", "CartModel", False),
        (UsagePattern.INHERITED_LOOKUP, "CartBadge", "ThemeScope", True),
    ]
    assert result.usages[1].usage_type == "subscribe"
    assert result.usages[1].location.method == "build"


def test_dependencies_follow_the_widget_tree(provider_source):
    result = _analyze(provider_source)
    deps = {d.provider_name: d for d in result.dependencies}
    assert set(deps) == {"CartModel", "ThemeScope"}

    cart = deps["CartModel"]
    assert cart.consumer_widget == "CartBadge"
    assert cart.resolved
    assert cart.access_path == ["ChangeNotifierProvider", "ThemeScope", "CartBadge"]
    assert deps["ThemeScope"].access_path == ["ThemeScope", "CartBadge"]

    summary = result.summary
    assert summary.providers == 3
    assert summary.inherited_widgets == 1
    assert summary.change_notifiers == 1
    assert summary.provider_instances == 1
    assert summary.dependencies == 2
    assert summary.unresolved_dependencies == 0
    assert summary.ssr_safe_usages == 1
    assert summary.ssr_unsafe_usages == 2


def test_consumer_outside_provider_subtree_is_unresolved():
    result = _analyze(
        "class CartModel extends ChangeNotifier {}\n"
        "class Badge extends StatelessWidget {\n"
        "  build(c) { const m = c.watch<CartModel>(); return new Text(m); }\n"
        "}\n"
        "class App extends StatelessWidget { build(c) { return new Badge(); } }\n"
        "function main() { runApp(new App()); }"
    )
    assert len(result.dependencies) == 1
    dep = result.dependencies[0]
    assert not dep.resolved
    assert dep.access_path == []
    assert result.summary.unresolved_dependencies == 1


def test_incomplete_inherited_widget():
    result = _analyze("class Scope extends InheritedWidget {}")
    issues = {i.type: i.severity for i in result.issues}
    assert issues == {
        "missing-update-should-notify": Severity.WARNING,
        "missing-of-accessor": Severity.INFO,
        "missing-child-property": Severity.INFO,
    }


def test_provider_without_create():
    result = _analyze(
        "class A extends StatelessWidget {\n"
        "  build(c) { return new Provider<Config>({ child: new B() }); }\n"
        "}"
    )
    types = [i.type for i in result.issues]
    assert types == ["provider-missing-create", "unused-provider"]
    assert result.issues[0].severity == Severity.ERROR
    assert result.providers[0].name == "Provider<Config>"
    assert not result.providers[0].notifies_on_change


def test_notifier_mutation_without_notify():
    result = _analyze(
        "class Model extends ChangeNotifier {\n"
        "  constructor() { super(); this.v = 0; }\n"
        "  update() { this.v = 1; }\n"
        "}"
    )
    assert [i.type for i in result.issues] == ["mutation-without-notify"]
    assert result.issues[0].affected_item == "Model.update"


def test_browser_dependent_provider():
    result = _analyze(
        "class Prefs extends ChangeNotifier {\n"
        "  load() { this.v = localStorage.getItem('v'); this.notifyListeners(); }\n"
        "}\n"
        "class App extends StatelessWidget {\n"
        "  build(c) { return new ChangeNotifierProvider({ create: (x) => new Prefs() }); }\n"
        "}"
    )
    prefs, instance = result.providers
    assert prefs.requires_browser
    assert prefs.browser_apis == ["localStorage"]
    assert instance.value_type == "Prefs"
    assert instance.requires_browser


def test_framework_lookups_and_navigation():
    result = _analyze(
        "class Page extends StatelessWidget {\n"
        "  build(context) {\n"
        "    const theme = Theme.of(context);\n"
        "    const size = context.mediaQuery.size;\n"
        "    return new Button({ onPressed: () => Navigator.of(context).push('/next') });\n"
        "  }\n"
        "}"
    )
    usages = [(u.pattern, u.lookup_type) for u in result.usages]
    assert usages == [
        (UsagePattern.INHERITED_LOOKUP, "Theme"),
        (UsagePattern.INHERITED_LOOKUP, "MediaQuery"),
        (UsagePattern.NAVIGATION_ACCESS, "Navigator"),
    ]
    assert result.dependencies == []


def test_consumer_widget():
    result = _analyze(
        "class Cart extends ChangeNotifier {}\n"
        "class Total extends StatelessWidget {\n"
        "  build(c) { return new Consumer<Cart>({ builder: (ctx, cart, child) => new Text(cart) }); }\n"
        "}"
    )
    consumer = [u for u in result.usages if u.pattern == UsagePattern.CONSUMER_WIDGET]
    assert len(consumer) == 1
    assert consumer[0].lookup_type == "Cart"
    assert not consumer[0].ssr_safe
