"""Unit tests for the dependency guard and the target whitelist decorators."""

import pytest

from convertflow.config import DEFAULT_CONFIG
from convertflow.exceptions import DependencyError, UnsupportedPairError
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressReporter
from convertflow.utils.decorators import requires_dependencies, supports_targets


@pytest.mark.unit
class TestRequiresDependencies:
    """Test package checks before a codec runs."""

    def test_available_package(self):
        """Test that satisfied requirements call through."""

        @requires_dependencies("json", [("pytest", "pytest", "")])
        def answer():
            return 42

        assert answer() == 42

    def test_missing_package(self):
        """Test the error for a package that cannot be imported."""

        @requires_dependencies("widget", [("not-a-real-pkg", "not_a_real_pkg_xyz", ">=1.0")])
        def never_called():
            raise AssertionError("should not run")

        with pytest.raises(DependencyError) as exc_info:
            never_called()

        error = exc_info.value
        assert error.converter_name == "widget"
        assert error.missing_packages == [("not-a-real-pkg", ">=1.0")]
        assert "pip install" in error.message
        assert isinstance(error.original_error, ImportError)

    def test_version_mismatch(self):
        """Test the error for an installed package that is too old."""

        @requires_dependencies("testing", [("pytest", "pytest", ">=9999")])
        def never_called():
            raise AssertionError("should not run")

        with pytest.raises(DependencyError) as exc_info:
            never_called()

        assert exc_info.value.version_mismatches[0][:2] == ("pytest", ">=9999")
        assert "version mismatches" in exc_info.value.message

    def test_preserves_metadata(self):
        """Test functools.wraps behaviour."""

        @requires_dependencies("json", [])
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."


def _echo_transform(**kwargs):
    calls = []

    @supports_targets("demo", **kwargs)
    def transform(source, target, progress, config):
        calls.append(target)
        return ConversionResult(b"ok", f"out.{target}", "text/plain")

    return transform, calls


@pytest.mark.unit
class TestSupportsTargets:
    """Test whitelist enforcement."""

    def setup_method(self):
        """Set up a source and reporter."""
        self.source = SourceFile("input.demo", b"data")
        self.progress = ProgressReporter()

    def test_handled_target_reaches_transform(self):
        """Test that handled targets are lower-cased and passed through."""
        transform, calls = _echo_transform(handled=("txt",))

        result = transform(self.source, "TXT", self.progress, DEFAULT_CONFIG)

        assert calls == ["txt"]
        assert result.payload == b"ok"

    def test_unlisted_target_is_rejected(self):
        """Test the error for targets outside the whitelist."""
        transform, calls = _echo_transform(handled=("txt", "csv"), delegated=("docx",))

        with pytest.raises(UnsupportedPairError) as exc_info:
            transform(self.source, "pdf", self.progress, DEFAULT_CONFIG)

        assert calls == []
        assert exc_info.value.source_format == "demo"
        assert exc_info.value.target_format == "pdf"
        assert exc_info.value.supported_targets == ["csv", "docx", "txt"]
        assert str(exc_info.value) == "DEMO to pdf not supported (supported: csv, docx, txt)"

    def test_delegated_target_uses_fallback(self):
        """Test that delegated targets never reach the transform."""
        transform, calls = _echo_transform(handled=("txt",), delegated=("md",))

        result = transform(self.source, "md", self.progress, DEFAULT_CONFIG)

        assert calls == []
        assert result.name == "input.md"
        assert b"Converted from: input.demo" in result.payload

    def test_delegate_unlisted(self):
        """Test that every unhandled target goes to the fallback."""
        transform, calls = _echo_transform(handled=("txt",), delegate_unlisted=True)

        result = transform(self.source, "anything", self.progress, DEFAULT_CONFIG)

        assert calls == []
        assert result.name == "input.anything"

    def test_declares_its_targets(self):
        """Test the introspection attributes."""
        transform, _ = _echo_transform(handled=("txt",), delegated=("md",))

        assert transform.source_format == "demo"
        assert transform.handled_targets == frozenset({"txt"})
        assert transform.delegated_targets == frozenset({"md"})
        assert transform.delegates_unlisted is False
