#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/exceptions.py
"""Custom exceptions for the docodec library.

This module defines specialized exception classes for the error conditions
that can occur while matching, decoding and encoding documents. These
exceptions provide more specific error information than generic built-ins.

Exception Hierarchy
-------------------
- DocodecError (base exception)

  - ValidationError (parameter/option validation)
    - InvalidOptionsError (wrong options class for a codec)

  - FileError (file access and I/O)
    - FileNotFoundError (file doesn't exist)
    - FileAccessError (permissions, locked files)
    - MalformedFileError (corrupted/invalid file structure)

  - FormatError (unsupported/unknown formats)
    - NoCodecMatchError (no codec matched the content or format)
    - UnsupportedOperationError (codec cannot decode or cannot encode)

  - ParsingError (input document parsing failures)
    - MalformedInputError (content that fails to parse at all)

  - RenderingError (output generation failures)
    - OutputWriteError (file write failures)

  - SecurityError (security violations)
    - NetworkSecurityError (disabled network, oversize responses, HTTP failures)

  - DependencyError (missing/incompatible packages)

Recoverable problems met while decoding (an unknown element or extension)
are never raised; they are logged as warnings by the codec and decoding
continues with a fallback mapping.

"""

from typing import Any


class DocodecError(Exception):
    """Base exception class for all docodec-specific errors.

    Catching this will catch all library-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(DocodecError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the parameter that failed validation
    parameter_value : Any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception, if any

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when an incorrect options class is given to a codec.

    Parameters
    ----------
    codec_name : str
        Name of the codec that received the wrong options
    expected_type : type
        The expected options class type
    received_type : type
        The actual options class type that was received

    """

    def __init__(
        self,
        codec_name: str,
        expected_type: type,
        received_type: type,
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the invalid options error with type details."""
        if message is None:
            message = (
                f"Invalid options type for '{codec_name}' codec. "
                f"Expected {expected_type.__name__}, got {received_type.__name__}."
            )
        super().__init__(
            message, parameter_name="options", parameter_value=received_type, original_error=original_error
        )
        self.codec_name = codec_name
        self.expected_type = expected_type
        self.received_type = received_type


class FileError(DocodecError):
    """Base exception for file-related errors.

    Parameters
    ----------
    message : str
        Description of the file error
    file_path : str, optional
        Path to the file that caused the error
    original_error : Exception, optional
        The original exception, if any

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error with path and message."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class FileNotFoundError(FileError):
    """Exception raised when a file cannot be found."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize with the missing file path."""
        if message is None:
            message = f"File not found: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class FileAccessError(FileError):
    """Exception raised when a file exists but cannot be read or written."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize with the inaccessible file path."""
        if message is None:
            message = f"Cannot access file: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class MalformedFileError(FileError):
    """Exception raised when a file has a corrupted or invalid structure."""

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize with a message and optional file path."""
        super().__init__(message, file_path=file_path, original_error=original_error)


class FormatError(DocodecError):
    """Exception raised for unsupported or unrecognized formats.

    Parameters
    ----------
    message : str, optional
        Custom error message
    format_type : str, optional
        The format that was not supported
    supported_formats : list[str], optional
        Formats that are supported, listed in the generated message

    """

    def __init__(
        self,
        message: str | None = None,
        format_type: str | None = None,
        supported_formats: list[str] | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the format error, generating a message if needed."""
        if message is None:
            if format_type:
                message = f"Unsupported format: '{format_type}'"
                if supported_formats:
                    formats_str = ", ".join(supported_formats[:5])
                    if len(supported_formats) > 5:
                        formats_str += f", and {len(supported_formats) - 5} more"
                    message += f". Supported formats include: {formats_str}"
            else:
                message = "Format is not supported for conversion"
        super().__init__(message, original_error=original_error)
        self.format_type = format_type
        self.supported_formats = supported_formats


class NoCodecMatchError(FormatError):
    """Exception raised when no codec matches the given content or format.

    The message names what was searched for, for example
    ``No codec could be found for content "foo.bar" for format "baz".``

    Parameters
    ----------
    content : str, optional
        The content or path that was matched against
    format : str, optional
        The format hint that was matched against

    """

    def __init__(self, content: str | None = None, format: str | None = None):
        """Initialize with the content and format that failed to match."""
        message = "No codec could be found"
        if content:
            message += f' for content "{content}"'
        if format:
            message += f' for format "{format}"'
        message += "."
        super().__init__(message, format_type=format)
        self.content = content


class UnsupportedOperationError(FormatError):
    """Exception raised when a codec does not implement decode or encode.

    Parameters
    ----------
    codec_name : str
        Name of the codec
    operation : str
        The operation that is not supported (``"decode"`` or ``"encode"``)
    message : str, optional
        Custom error message

    """

    def __init__(self, codec_name: str, operation: str, message: str | None = None):
        """Initialize with the codec and unsupported operation."""
        if message is None:
            message = f"The '{codec_name}' codec does not support {operation}"
        super().__init__(message, format_type=codec_name)
        self.codec_name = codec_name
        self.operation = operation


class ParsingError(DocodecError):
    """Exception raised when a document cannot be decoded.

    Parameters
    ----------
    message : str
        Description of the parsing error
    parsing_stage : str, optional
        The stage of parsing where the error occurred
    original_error : Exception, optional
        The original exception, if any

    """

    def __init__(self, message: str, parsing_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the parsing error with stage information."""
        super().__init__(message, original_error)
        self.parsing_stage = parsing_stage


class MalformedInputError(ParsingError):
    """Exception raised when foreign content fails to parse at all.

    Parameters
    ----------
    message : str
        Description of the problem
    snippet : str, optional
        The part of the input near the failure, for context
    original_error : Exception, optional
        The original exception, if any

    """

    def __init__(self, message: str, snippet: str | None = None, original_error: Exception | None = None):
        """Initialize with a message and optional snippet."""
        if snippet:
            shown = snippet if len(snippet) <= 80 else snippet[:77] + "..."
            message = f"{message}: {shown!r}"
        super().__init__(message, parsing_stage="parse", original_error=original_error)
        self.snippet = snippet


class RenderingError(DocodecError):
    """Exception raised when a node cannot be encoded.

    Parameters
    ----------
    message : str
        Description of the rendering error
    rendering_stage : str, optional
        The stage of rendering where the error occurred
    original_error : Exception, optional
        The original exception, if any

    """

    def __init__(self, message: str, rendering_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the rendering error with stage information."""
        super().__init__(message, original_error)
        self.rendering_stage = rendering_stage


class OutputWriteError(RenderingError):
    """Exception raised when encoded output cannot be written."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize with the output path."""
        if message is None:
            message = f"Failed to write output file: {file_path}"
        super().__init__(message, rendering_stage="file_write", original_error=original_error)
        self.file_path = file_path


class SecurityError(DocodecError):
    """Exception raised for security violations."""


class NetworkSecurityError(SecurityError):
    """Exception raised for network access violations and failed fetches."""


class DependencyError(DocodecError):
    """Exception raised when required dependencies are not available.

    Parameters
    ----------
    codec_name : str
        Name of the codec requiring dependencies
    missing_packages : list[tuple[str, str]]
        List of (package_name, version_spec) tuples for missing packages
    version_mismatches : list[tuple[str, str, str]], optional
        List of (package_name, required_version, installed_version) tuples
    install_command : str, optional
        Suggested pip install command to resolve the issue
    message : str, optional
        Custom error message. If not provided, generates a helpful message

    """

    def __init__(
        self,
        codec_name: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]] | None = None,
        install_command: str = "",
        message: str | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Initialize the dependency error with package details."""
        version_mismatches = version_mismatches or []
        self.original_import_error = original_import_error
        if message is None:
            message_parts = []

            if missing_packages:
                pkg_list = ", ".join(f"'{name}{spec}'" if spec else f"'{name}'" for name, spec in missing_packages)
                message_parts.append(f"{codec_name.upper()} codec requires the following packages: {pkg_list}")

            if version_mismatches:
                mismatch_str = ", ".join(
                    f"'{name}' (requires {required}, but {installed} is installed)"
                    for name, required, installed in version_mismatches
                )
                message_parts.append(f"{codec_name.upper()} codec has version mismatches: {mismatch_str}")

            message = "\n".join(message_parts)

            if install_command:
                message += f"\nInstall with: {install_command}"
            else:
                all_packages = missing_packages + [(name, req) for name, req, _ in version_mismatches]
                if all_packages:
                    packages_str = " ".join(f'"{name}{spec}"' if spec else name for name, spec in all_packages)
                    message += f"\nInstall with: pip install --upgrade {packages_str}"

        super().__init__(message)
        self.codec_name = codec_name
        self.missing_packages = missing_packages
        self.version_mismatches = version_mismatches
        self.install_command = install_command
