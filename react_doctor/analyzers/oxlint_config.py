"""Build the oxlint configuration for a project's framework and compiler facts."""

from __future__ import annotations

from dataclasses import dataclass

REACT_RULES = {
    "react/rules-of-hooks": "error",
    "react/exhaustive-deps": "warn",
    "react/jsx-key": "error",
    "react/jsx-no-duplicate-props": "error",
    "react/jsx-no-target-blank": "warn",
    "react/no-children-prop": "warn",
    "react/no-danger-with-children": "error",
    "react/no-direct-mutation-state": "error",
    "react/no-string-refs": "warn",
    "react/no-unknown-property": "warn",
    "react/void-dom-elements-no-children": "error",
}

JSX_A11Y_RULES = {
    "jsx-a11y/alt-text": "error",
    "jsx-a11y/anchor-is-valid": "warn",
    "jsx-a11y/aria-props": "error",
    "jsx-a11y/aria-role": "error",
    "jsx-a11y/click-events-have-key-events": "warn",
    "jsx-a11y/heading-has-content": "warn",
    "jsx-a11y/html-has-lang": "warn",
    "jsx-a11y/iframe-has-title": "warn",
    "jsx-a11y/no-autofocus": "warn",
    "jsx-a11y/no-redundant-roles": "warn",
    "jsx-a11y/role-has-required-aria-props": "error",
    "jsx-a11y/tabindex-no-positive": "warn",
}

# Memoization hints; moot once React Compiler memoizes automatically
REACT_PERF_RULES = {
    "react-perf/jsx-no-new-object-as-prop": "warn",
    "react-perf/jsx-no-new-array-as-prop": "warn",
    "react-perf/jsx-no-new-function-as-prop": "warn",
    "react-perf/jsx-no-jsx-as-prop": "warn",
}

# Reports code React Compiler bails out on; only meaningful when it is enabled
REACT_COMPILER_RULES = {
    "react-hooks-js/purity": "error",
    "react-hooks-js/refs": "error",
    "react-hooks-js/immutability": "error",
    "react-hooks-js/set-state-in-render": "error",
    "react-hooks-js/static-components": "error",
    "react-hooks-js/use-memo": "error",
    "react-hooks-js/preserve-manual-memoization": "warn",
    "react-hooks-js/incompatible-library": "warn",
    "react-hooks-js/unsupported-syntax": "warn",
}

DOCTOR_GENERAL_RULES = {
    "no-derived-state-effect": "warn",
    "no-fetch-in-effect": "warn",
    "no-cascading-set-state": "warn",
    "no-effect-event-handler": "warn",
    "no-derived-useState": "warn",
    "prefer-useReducer": "warn",
    "rerender-lazy-state-init": "warn",
    "rerender-functional-setstate": "warn",
    "rerender-dependencies": "warn",
    "no-generic-handler-names": "warn",
    "no-giant-component": "warn",
    "no-render-in-render": "warn",
    "no-nested-component-definition": "error",
    "no-usememo-simple-expression": "warn",
    "no-layout-property-animation": "warn",
    "rerender-memo-with-default-value": "warn",
    "rendering-animate-svg-wrapper": "warn",
    "rendering-usetransition-loading": "warn",
    "rendering-hydration-no-flicker": "warn",
    "no-transition-all": "warn",
    "no-global-css-variable-animation": "warn",
    "no-large-animated-blur": "warn",
    "no-scale-from-zero": "warn",
    "no-permanent-will-change": "warn",
    "no-secrets-in-client-code": "error",
    "no-barrel-import": "warn",
    "no-full-lodash-import": "warn",
    "no-moment": "warn",
    "prefer-dynamic-import": "warn",
    "use-lazy-motion": "warn",
    "no-undeferred-third-party": "warn",
    "no-array-index-as-key": "warn",
    "rendering-conditional-render": "error",
    "no-prevent-default": "warn",
    "client-passive-event-listeners": "warn",
    "async-parallel": "warn",
}

DOCTOR_NEXTJS_RULES = {
    "nextjs-no-img-element": "warn",
    "nextjs-async-client-component": "error",
    "nextjs-no-a-element": "warn",
    "nextjs-no-use-search-params-without-suspense": "warn",
    "nextjs-no-client-fetch-for-server-data": "warn",
    "nextjs-missing-metadata": "warn",
    "nextjs-no-client-side-redirect": "warn",
    "nextjs-no-redirect-in-try-catch": "error",
    "nextjs-image-missing-sizes": "warn",
    "nextjs-no-native-script": "warn",
    "nextjs-inline-script-missing-id": "warn",
    "nextjs-no-font-link": "warn",
    "nextjs-no-css-link": "warn",
    "nextjs-no-polyfill-script": "warn",
    "nextjs-no-head-import": "warn",
    "nextjs-no-side-effect-in-get-handler": "error",
    "server-auth-actions": "error",
    "server-after-nonblocking": "warn",
}

DOCTOR_REACT_NATIVE_RULES = {
    "rn-no-raw-text": "error",
    "rn-no-deprecated-modules": "warn",
    "rn-no-legacy-expo-packages": "warn",
    "rn-no-dimensions-get": "warn",
    "rn-no-inline-flatlist-renderitem": "warn",
    "rn-no-legacy-shadow-styles": "warn",
    "rn-prefer-reanimated": "warn",
    "rn-no-single-element-style-array": "warn",
}

REACT_NATIVE_FRAMEWORKS = {"expo", "react-native"}

CATEGORIES_OFF = {
    "correctness": "off",
    "suspicious": "off",
    "pedantic": "off",
    "perf": "off",
    "restriction": "off",
    "style": "off",
    "nursery": "off",
}


@dataclass(frozen=True)
class ProjectFacts:
    framework: str
    has_react_compiler: bool
    plugin_path: str | None = None


def _doctor_rules(framework: str) -> dict[str, str]:
    rules = dict(DOCTOR_GENERAL_RULES)
    if framework == "nextjs":
        rules.update(DOCTOR_NEXTJS_RULES)
    if framework in REACT_NATIVE_FRAMEWORKS:
        rules.update(DOCTOR_REACT_NATIVE_RULES)
    return {f"react-doctor/{name}": severity for name, severity in rules.items()}


def build_oxlint_config(facts: ProjectFacts) -> dict:
    """Pure mapping from project facts to an oxlint config document."""
    plugins = ["react", "jsx-a11y"]
    rules: dict[str, str] = {**REACT_RULES, **JSX_A11Y_RULES}
    js_plugins: list[dict[str, str]] = []

    if facts.has_react_compiler:
        js_plugins.append({"name": "react-hooks-js", "specifier": "eslint-plugin-react-hooks"})
        rules.update(REACT_COMPILER_RULES)
    else:
        plugins.append("react-perf")
        rules.update(REACT_PERF_RULES)

    if facts.plugin_path:
        js_plugins.append({"name": "react-doctor", "specifier": facts.plugin_path})
        rules.update(_doctor_rules(facts.framework))

    config: dict = {
        "plugins": plugins,
        "categories": dict(CATEGORIES_OFF),
        "rules": rules,
    }
    if js_plugins:
        config["jsPlugins"] = js_plugins
    return config
