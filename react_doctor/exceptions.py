"""
React Doctor — Custom Exceptions.

Fatal errors abort the scan of a project; analyzer errors are caught by the
orchestrator and turned into skipped checks.
"""


class ReactDoctorError(Exception):
    """Base exception for all React Doctor errors."""


class NoPackageJsonError(ReactDoctorError):
    """Raised when the manifest directory has no package.json."""

    def __init__(self, directory):
        self.directory = directory
        super().__init__(f"No package.json found in {directory}")


class NoReactDependencyError(ReactDoctorError):
    """Raised when neither the project nor its workspaces depend on React."""

    def __init__(self):
        super().__init__("No React dependency found in package.json")


class ProjectNotFoundError(ReactDoctorError):
    """Raised when --project names a workspace package that does not exist."""


class AnalyzerError(ReactDoctorError):
    """Raised when an external analyzer fails to run or returns garbage."""

    def __init__(self, analyzer: str, detail: str):
        self.analyzer = analyzer
        self.detail = detail
        super().__init__(f"Failed to run {analyzer}: {detail}")


class NativeBindingError(AnalyzerError):
    """Raised when the linter cannot load its native binding."""
