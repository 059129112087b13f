"""
Lint Adapter - runs oxlint and maps its JSON report to Diagnostics.

The project's file subset is passed on the command line in diff mode, so long
subsets are split into sequential batches that each stay under
SPAWN_ARGS_MAX_LENGTH_CHARS.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from react_doctor.analyzers.base import Analyzer, AnalyzerContext
from react_doctor.analyzers.node import resolve_node_for_oxlint
from react_doctor.analyzers.oxlint_config import ProjectFacts, build_oxlint_config
from react_doctor.analyzers.process import CommandResult, CommandRunner, run_command
from react_doctor.constants import (
    ERROR_PREVIEW_LENGTH_CHARS,
    JSX_FILE_PATTERN,
    OXLINT_NODE_REQUIREMENT,
    OXLINT_RECOMMENDED_NODE_MAJOR,
    SPAWN_ARGS_MAX_LENGTH_CHARS,
)
from react_doctor.exceptions import AnalyzerError, NativeBindingError
from react_doctor.types import Diagnostic

logger = logging.getLogger("react_doctor.analyzers.oxlint")

PLUGIN_CATEGORY_MAP = {
    "react": "Correctness",
    "react-hooks": "Correctness",
    "react-hooks-js": "React Compiler",
    "react-perf": "Performance",
    "jsx-a11y": "Accessibility",
}

RULE_CATEGORY_MAP = {
    "react-doctor/no-derived-state-effect": "State & Effects",
    "react-doctor/no-fetch-in-effect": "State & Effects",
    "react-doctor/no-cascading-set-state": "State & Effects",
    "react-doctor/no-effect-event-handler": "State & Effects",
    "react-doctor/no-derived-useState": "State & Effects",
    "react-doctor/prefer-useReducer": "State & Effects",
    "react-doctor/rerender-lazy-state-init": "Performance",
    "react-doctor/rerender-functional-setstate": "Performance",
    "react-doctor/rerender-dependencies": "State & Effects",
    "react-doctor/no-generic-handler-names": "Architecture",
    "react-doctor/no-giant-component": "Architecture",
    "react-doctor/no-render-in-render": "Architecture",
    "react-doctor/no-nested-component-definition": "Correctness",
    "react-doctor/no-usememo-simple-expression": "Performance",
    "react-doctor/no-layout-property-animation": "Performance",
    "react-doctor/rerender-memo-with-default-value": "Performance",
    "react-doctor/rendering-animate-svg-wrapper": "Performance",
    "react-doctor/rendering-usetransition-loading": "Performance",
    "react-doctor/rendering-hydration-no-flicker": "Performance",
    "react-doctor/no-transition-all": "Performance",
    "react-doctor/no-global-css-variable-animation": "Performance",
    "react-doctor/no-large-animated-blur": "Performance",
    "react-doctor/no-scale-from-zero": "Performance",
    "react-doctor/no-permanent-will-change": "Performance",
    "react-doctor/no-secrets-in-client-code": "Security",
    "react-doctor/no-barrel-import": "Bundle Size",
    "react-doctor/no-full-lodash-import": "Bundle Size",
    "react-doctor/no-moment": "Bundle Size",
    "react-doctor/prefer-dynamic-import": "Bundle Size",
    "react-doctor/use-lazy-motion": "Bundle Size",
    "react-doctor/no-undeferred-third-party": "Bundle Size",
    "react-doctor/no-array-index-as-key": "Correctness",
    "react-doctor/rendering-conditional-render": "Correctness",
    "react-doctor/no-prevent-default": "Correctness",
    "react-doctor/nextjs-no-img-element": "Next.js",
    "react-doctor/nextjs-async-client-component": "Next.js",
    "react-doctor/nextjs-no-a-element": "Next.js",
    "react-doctor/nextjs-no-use-search-params-without-suspense": "Next.js",
    "react-doctor/nextjs-no-client-fetch-for-server-data": "Next.js",
    "react-doctor/nextjs-missing-metadata": "Next.js",
    "react-doctor/nextjs-no-client-side-redirect": "Next.js",
    "react-doctor/nextjs-no-redirect-in-try-catch": "Next.js",
    "react-doctor/nextjs-image-missing-sizes": "Next.js",
    "react-doctor/nextjs-no-native-script": "Next.js",
    "react-doctor/nextjs-inline-script-missing-id": "Next.js",
    "react-doctor/nextjs-no-font-link": "Next.js",
    "react-doctor/nextjs-no-css-link": "Next.js",
    "react-doctor/nextjs-no-polyfill-script": "Next.js",
    "react-doctor/nextjs-no-head-import": "Next.js",
    "react-doctor/nextjs-no-side-effect-in-get-handler": "Security",
    "react-doctor/server-auth-actions": "Server",
    "react-doctor/server-after-nonblocking": "Server",
    "react-doctor/client-passive-event-listeners": "Performance",
    "react-doctor/async-parallel": "Performance",
    "react-doctor/rn-no-raw-text": "React Native",
    "react-doctor/rn-no-deprecated-modules": "React Native",
    "react-doctor/rn-no-legacy-expo-packages": "React Native",
    "react-doctor/rn-no-dimensions-get": "React Native",
    "react-doctor/rn-no-inline-flatlist-renderitem": "React Native",
    "react-doctor/rn-no-legacy-shadow-styles": "React Native",
    "react-doctor/rn-prefer-reanimated": "React Native",
    "react-doctor/rn-no-single-element-style-array": "React Native",
}

RULE_HELP_MAP = {
    "no-derived-state-effect": (
        "For derived state, compute inline: `const x = fn(dep)`. For state resets "
        "on prop change, use a key prop: `<Component key={prop} />`"
    ),
    "no-fetch-in-effect": (
        "Use `useQuery()` from @tanstack/react-query, `useSWR()`, or fetch in a "
        "Server Component instead"
    ),
    "no-cascading-set-state": (
        "Combine into useReducer: `const [state, dispatch] = useReducer(reducer, initialState)`"
    ),
    "no-effect-event-handler": (
        "Move the conditional logic into onClick, onChange, or onSubmit handlers directly"
    ),
    "no-derived-useState": (
        "Remove useState and compute the value inline: `const value = transform(propName)`"
    ),
    "prefer-useReducer": (
        "Group related state: `const [state, dispatch] = useReducer(reducer, { field1, field2, ... })`"
    ),
    "rerender-lazy-state-init": (
        "Wrap in an arrow function so it only runs once: `useState(() => expensiveComputation())`"
    ),
    "rerender-functional-setstate": (
        "Use the callback form: `setState(prev => prev + 1)` to always read the latest value"
    ),
    "rerender-dependencies": (
        "Extract to a useMemo, useRef, or module-level constant so the reference is stable"
    ),
    "no-generic-handler-names": (
        "Rename to describe the action: e.g. `handleSubmit` → `saveUserProfile`, "
        "`handleClick` → `toggleSidebar`"
    ),
    "no-giant-component": (
        "Extract logical sections into focused components: `<UserHeader />`, `<UserActions />`, etc."
    ),
    "no-render-in-render": (
        "Extract to a named component: `const ListItem = ({ item }) => <div>{item.name}</div>`"
    ),
    "no-nested-component-definition": (
        "Move to a separate file or to module scope above the parent component"
    ),
    "no-usememo-simple-expression": (
        "Remove useMemo. Property access, math, and ternaries are already cheap "
        "without memoization"
    ),
    "no-layout-property-animation": (
        "Use `transform: translateX()` or `scale()` instead. They run on the "
        "compositor and skip layout/paint"
    ),
    "rerender-memo-with-default-value": (
        "Move to module scope: `const EMPTY_ITEMS: Item[] = []` then use as the default value"
    ),
    "rendering-animate-svg-wrapper": (
        "Wrap the SVG: `<motion.div animate={...}><svg>...</svg></motion.div>`"
    ),
    "rendering-usetransition-loading": (
        "Replace with `const [isPending, startTransition] = useTransition()` to "
        "avoid a re-render for the loading state"
    ),
    "rendering-hydration-no-flicker": (
        "Use `useSyncExternalStore(subscribe, getSnapshot, getServerSnapshot)` or add "
        "`suppressHydrationWarning` to the element"
    ),
    "no-transition-all": (
        'List specific properties: `transition: "opacity 200ms, transform 200ms"`, or in '
        "Tailwind use `transition-colors`, `transition-opacity`, or `transition-transform`"
    ),
    "no-global-css-variable-animation": (
        "Set the variable on the nearest element instead of a parent, or use `@property` "
        "with `inherits: false` to prevent cascade. Better yet, use targeted "
        "`element.style.transform` updates"
    ),
    "no-large-animated-blur": (
        "Keep blur radius under 10px, or apply blur to a smaller element. Large blurs "
        "multiply GPU memory usage with layer size"
    ),
    "no-scale-from-zero": (
        "Use `initial={{ scale: 0.95, opacity: 0 }}`. Elements should deflate like a "
        "balloon, not vanish into a point"
    ),
    "no-permanent-will-change": (
        "Add will-change on animation start (`onMouseEnter`) and remove on end "
        "(`onAnimationEnd`). Permanent promotion wastes GPU memory and can degrade performance"
    ),
    "no-secrets-in-client-code": (
        "Move to server-side `process.env.SECRET_NAME`. Only `NEXT_PUBLIC_*` vars are "
        "safe for the client (and should not contain secrets)"
    ),
    "no-barrel-import": (
        "Import from the direct path: `import { Button } from './components/Button'` "
        "instead of `./components`"
    ),
    "no-full-lodash-import": (
        "Import the specific function: `import debounce from 'lodash/debounce'` (saves ~70kb)"
    ),
    "no-moment": (
        "Replace with `import { format } from 'date-fns'` (tree-shakeable) or "
        "`import dayjs from 'dayjs'` (2kb)"
    ),
    "prefer-dynamic-import": (
        "Use `const Component = dynamic(() => import('library'), { ssr: false })` from "
        "next/dynamic or React.lazy()"
    ),
    "use-lazy-motion": (
        'Use `import { LazyMotion, m } from "framer-motion"` with `domAnimation` '
        "features (saves ~30kb)"
    ),
    "no-undeferred-third-party": (
        'Use `next/script` with `strategy="lazyOnload"` or add the `defer` attribute'
    ),
    "no-array-index-as-key": (
        "Use a stable unique identifier: `key={item.id}` or `key={item.slug}`. Index "
        "keys break on reorder/filter"
    ),
    "rendering-conditional-render": (
        "Change to `{items.length > 0 && <List />}` or use a ternary: "
        "`{items.length ? <List /> : null}`"
    ),
    "no-prevent-default": (
        "Use `<form action={serverAction}>` (works without JS) or `<button>` instead of "
        "`<a>` with preventDefault"
    ),
    "nextjs-no-img-element": (
        "`import Image from 'next/image'` provides automatic WebP/AVIF, lazy loading, "
        "and responsive srcset"
    ),
    "nextjs-async-client-component": (
        "Fetch data in a parent Server Component and pass it as props, or use "
        "useQuery/useSWR in the client component"
    ),
    "nextjs-no-a-element": (
        "`import Link from 'next/link'` enables client-side navigation, prefetching, "
        "and preserves scroll position"
    ),
    "nextjs-no-use-search-params-without-suspense": (
        "Wrap the component using useSearchParams: "
        "`<Suspense fallback={<Skeleton />}><SearchComponent /></Suspense>`"
    ),
    "nextjs-no-client-fetch-for-server-data": (
        "Remove 'use client' and fetch directly in the Server Component. No API "
        "round-trip, secrets stay on server"
    ),
    "nextjs-missing-metadata": (
        "Add `export const metadata = { title: '...', description: '...' }` or "
        "`export async function generateMetadata()`"
    ),
    "nextjs-no-client-side-redirect": (
        "Use `redirect('/path')` from 'next/navigation' in a Server Component, or "
        "handle in middleware"
    ),
    "nextjs-no-redirect-in-try-catch": (
        "Move the redirect/notFound call outside the try block, or add "
        "`unstable_rethrow(error)` in the catch"
    ),
    "nextjs-image-missing-sizes": (
        'Add sizes for responsive behavior: `sizes="(max-width: 768px) 100vw, 50vw"` '
        "matching your layout breakpoints"
    ),
    "nextjs-no-native-script": (
        '`import Script from "next/script"` and use `strategy="afterInteractive"` for '
        'analytics or `"lazyOnload"` for widgets'
    ),
    "nextjs-inline-script-missing-id": (
        'Add `id="descriptive-name"` so Next.js can track, deduplicate, and re-execute '
        "the script correctly"
    ),
    "nextjs-no-font-link": (
        '`import { Inter } from "next/font/google"` is self-hosted with zero layout '
        "shift and no render-blocking requests"
    ),
    "nextjs-no-css-link": (
        "Import CSS directly: `import './styles.css'` or use CSS Modules: "
        "`import styles from './Button.module.css'`"
    ),
    "nextjs-no-polyfill-script": (
        "Next.js includes polyfills for fetch, Promise, Object.assign, Array.from, and "
        "50+ others automatically"
    ),
    "nextjs-no-head-import": (
        "Use the Metadata API instead: `export const metadata = { title: '...' }` or "
        "`export async function generateMetadata()`"
    ),
    "nextjs-no-side-effect-in-get-handler": (
        "Move the side effect to a POST handler and use a <form> or fetch with method "
        "POST. GET requests can be triggered by prefetching and are vulnerable to CSRF"
    ),
    "server-auth-actions": (
        "Add `const session = await auth()` at the top and throw/redirect if "
        "unauthorized before any data access"
    ),
    "server-after-nonblocking": (
        "`import { after } from 'next/server'` then wrap: "
        "`after(() => analytics.track(...))` so the response isn't blocked"
    ),
    "client-passive-event-listeners": (
        "Add `{ passive: true }` as the third argument: "
        "`addEventListener('scroll', handler, { passive: true })`"
    ),
    "async-parallel": (
        "Use `const [a, b] = await Promise.all([fetchA(), fetchB()])` to run "
        "independent operations concurrently"
    ),
    "rn-no-raw-text": (
        "Wrap text in a `<Text>` component: `<Text>{value}</Text>`. Raw strings "
        "outside `<Text>` crash on React Native"
    ),
    "rn-no-deprecated-modules": (
        "Import from the community package instead. Deprecated modules were removed "
        "from the react-native core"
    ),
    "rn-no-legacy-expo-packages": (
        "Migrate to the recommended replacement package. Legacy Expo packages are no "
        "longer maintained"
    ),
    "rn-no-dimensions-get": (
        "Use `const { width, height } = useWindowDimensions()`. It updates reactively "
        "on rotation and resize"
    ),
    "rn-no-inline-flatlist-renderitem": (
        "Extract renderItem to a named function or wrap in useCallback to avoid "
        "re-creating on every render"
    ),
    "rn-no-legacy-shadow-styles": (
        "Use `boxShadow` for cross-platform shadows on the new architecture instead of "
        "platform-specific shadow properties"
    ),
    "rn-prefer-reanimated": (
        "Use `import Animated from 'react-native-reanimated'`. Animations run on the "
        "UI thread instead of the JS thread"
    ),
    "rn-no-single-element-style-array": (
        "Use `style={value}` instead of `style={[value]}`. Single-element arrays add "
        "unnecessary allocation"
    ),
}

RULE_CODE_PATTERN = re.compile(r"^(.+)\((.+)\)$")
# Some rules embed "path/to/file.tsx:12:4 ..." in their message text
FILEPATH_WITH_LOCATION_PATTERN = re.compile(r"\S+\.\w+:\d+:\d+[\s\S]*$")
NATIVE_BINDING_PATTERN = re.compile(r"native binding", re.IGNORECASE)

REACT_COMPILER_PLUGIN = "react-hooks-js"
REACT_COMPILER_MESSAGE = "React Compiler can't optimize this code"


# ─── Output mapping ──────────────────────────────────────────────────


def parse_rule_code(code: str) -> tuple[str, str]:
    """Split ``eslint-plugin-react(jsx-key)`` into ``("react", "jsx-key")``."""
    match = RULE_CODE_PATTERN.match(code)
    if not match:
        return "unknown", code
    plugin = match.group(1)
    if plugin.startswith("eslint-plugin-"):
        plugin = plugin[len("eslint-plugin-"):]
    return plugin, match.group(2)


def clean_diagnostic_message(message: str, help_text: str, plugin: str, rule: str) -> tuple[str, str]:
    cleaned = FILEPATH_WITH_LOCATION_PATTERN.sub("", message).strip()
    if plugin == REACT_COMPILER_PLUGIN:
        return REACT_COMPILER_MESSAGE, cleaned or help_text
    return cleaned or message, help_text or RULE_HELP_MAP.get(rule, "")


def resolve_diagnostic_category(plugin: str, rule: str) -> str:
    return RULE_CATEGORY_MAP.get(f"{plugin}/{rule}") or PLUGIN_CATEGORY_MAP.get(plugin, "Other")


def _first_span(entry: dict) -> dict:
    labels = entry.get("labels") or []
    if not labels or not isinstance(labels[0], dict):
        return {}
    span = labels[0].get("span")
    return span if isinstance(span, dict) else {}


def parse_oxlint_output(stdout: str) -> list[Diagnostic]:
    """Map oxlint's ``--format json`` report to Diagnostics.

    Entries without a rule code, and entries outside JSX/TSX files, are dropped.

    Raises:
        AnalyzerError: stdout is not a JSON report.
    """
    stdout = stdout.strip()
    if not stdout:
        return []
    try:
        report = json.loads(stdout)
    except json.JSONDecodeError:
        raise AnalyzerError(
            "oxlint", f"could not parse output: {stdout[:ERROR_PREVIEW_LENGTH_CHARS]}"
        ) from None
    if not isinstance(report, dict) or not isinstance(report.get("diagnostics"), list):
        raise AnalyzerError(
            "oxlint", f"unexpected report shape: {stdout[:ERROR_PREVIEW_LENGTH_CHARS]}"
        )

    diagnostics = []
    for entry in report["diagnostics"]:
        code = entry.get("code")
        filename = entry.get("filename") or ""
        if not code or not JSX_FILE_PATTERN.search(filename):
            continue

        plugin, rule = parse_rule_code(code)
        message, help_text = clean_diagnostic_message(
            entry.get("message") or "", entry.get("help") or "", plugin, rule
        )
        span = _first_span(entry)
        diagnostics.append(
            Diagnostic(
                file_path=filename,
                plugin=plugin,
                rule=rule,
                severity="error" if entry.get("severity") == "error" else "warning",
                message=message,
                help=help_text,
                line=int(span.get("line") or 0),
                column=int(span.get("column") or 0),
                category=resolve_diagnostic_category(plugin, rule),
            )
        )
    return diagnostics


# ─── Invocation ──────────────────────────────────────────────────────


def estimate_args_length(args: list[str]) -> int:
    return sum(len(arg) + 1 for arg in args)


def batch_include_paths(
    base_args: list[str],
    include_paths: list[str],
    max_length: int = SPAWN_ARGS_MAX_LENGTH_CHARS,
) -> list[list[str]]:
    """Greedily partition ``include_paths`` so each command line fits ``max_length``.

    A single path longer than the ceiling still gets its own batch.
    """
    base_length = estimate_args_length(base_args)
    batches: list[list[str]] = []
    current: list[str] = []
    current_length = base_length

    for path in include_paths:
        entry_length = len(path) + 1
        if current and current_length + entry_length > max_length:
            batches.append(current)
            current = []
            current_length = base_length
        current.append(path)
        current_length += entry_length

    if current:
        batches.append(current)
    return batches


@dataclass(frozen=True)
class OxlintCommand:
    """How to launch oxlint: argv prefix plus a directory to put first on PATH."""

    args: list[str]
    path_prefix: str | None = None

    def environment(self) -> dict[str, str] | None:
        if self.path_prefix is None:
            return None
        inherited = os.environ.get("PATH", "")
        return {**os.environ, "PATH": os.pathsep.join(filter(None, [self.path_prefix, inherited]))}


def resolve_oxlint_command(root_directory: Path, oxlint_binary: str | None = None,
                           node_binary: str | None = None) -> OxlintCommand | None:
    """Launch command for oxlint, or None when Node is required but missing.

    Order: explicit binary, the project's own install run through a compatible
    Node, ``oxlint`` on PATH, then ``npx``. The PATH and ``npx`` launchers start
    Node through their shebang, so a compatible Node that is not the first one
    on PATH has its directory prepended for them.
    """
    if oxlint_binary:
        return OxlintCommand([oxlint_binary])

    node = resolve_node_for_oxlint(node_binary)
    local_binary = root_directory / "node_modules" / "oxlint" / "bin" / "oxlint"
    if local_binary.is_file():
        if node is None:
            return None
        return OxlintCommand([node.binary_path, str(local_binary)])

    if node is None:
        return None
    node_directory = str(Path(node.binary_path).parent)
    path_prefix = None if node.is_path_node else node_directory

    path_binary = shutil.which("oxlint")
    if path_binary:
        return OxlintCommand([path_binary], path_prefix)

    # Prefer the npx that ships alongside the resolved Node
    npx = shutil.which("npx", path=node_directory) or shutil.which("npx")
    if npx is None:
        return None
    return OxlintCommand([npx, "--yes", "oxlint"], path_prefix)


def config_path_for_process() -> Path:
    return Path(tempfile.gettempdir()) / f"react-doctor-oxlintrc-{os.getpid()}.json"


def _check_result(result: CommandResult) -> str:
    stdout = result.stdout.strip()
    if stdout:
        return stdout
    stderr = result.stderr.strip()
    if stderr:
        if NATIVE_BINDING_PATTERN.search(stderr):
            raise NativeBindingError("oxlint", stderr)
        raise AnalyzerError("oxlint", stderr)
    return ""


class LintAnalyzer(Analyzer):
    """Runs oxlint over the whole project or over a batched JSX/TSX subset."""

    name = "oxlint"
    check_label = "lint"

    def __init__(self, runner: CommandRunner | None = None, command: list[str] | None = None):
        self._runner = runner or run_command
        # Fixed command prefix; resolved per project when None
        self._command = command

    def _resolve_command(self, context: AnalyzerContext) -> OxlintCommand:
        if self._command is not None:
            return OxlintCommand(list(self._command))
        command = resolve_oxlint_command(
            context.root_directory,
            oxlint_binary=context.environment.oxlint_binary,
            node_binary=context.environment.node_binary,
        )
        if command is None:
            raise AnalyzerError(
                "oxlint",
                f"no compatible Node.js found (oxlint requires {OXLINT_NODE_REQUIREMENT}; "
                f"try `nvm install {OXLINT_RECOMMENDED_NODE_MAJOR}`)",
            )
        return command

    async def _spawn(self, args: list[str], cwd: Path, env: dict[str, str] | None) -> str:
        try:
            result = await self._runner(args, cwd, env=env)
        except (OSError, TimeoutError) as e:
            raise AnalyzerError("oxlint", str(e)) from e
        return _check_result(result)

    async def run(self, context: AnalyzerContext) -> list[Diagnostic]:
        include_paths = context.include_paths
        if include_paths is not None and not include_paths:
            return []

        command = self._resolve_command(context)
        env = command.environment()
        facts = ProjectFacts(
            framework=context.project.framework,
            has_react_compiler=context.project.has_react_compiler,
            plugin_path=context.environment.plugin_path,
        )
        config_path = config_path_for_process()

        try:
            config_path.write_text(json.dumps(build_oxlint_config(facts), indent=2), encoding="utf-8")

            base_args = [*command.args, "-c", str(config_path), "--format", "json"]
            if context.project.has_typescript:
                base_args += ["--tsconfig", "./tsconfig.json"]

            batches = (
                batch_include_paths(base_args, include_paths)
                if include_paths is not None
                else [["."]]
            )
            if len(batches) > 1:
                logger.debug("Linting %d files in %d batches", len(include_paths), len(batches))

            diagnostics: list[Diagnostic] = []
            for batch in batches:
                stdout = await self._spawn([*base_args, *batch], context.root_directory, env)
                diagnostics.extend(parse_oxlint_output(stdout))
            return diagnostics
        except OSError as e:
            raise AnalyzerError("oxlint", f"could not write config: {e}") from e
        finally:
            config_path.unlink(missing_ok=True)
