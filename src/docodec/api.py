#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/api.py
"""The major exported API functions for decoding, encoding and converting documents."""

from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from typing import Any, Optional, TypeVar, Union, get_type_hints

from docodec import vfile
from docodec.codec_registry import match
from docodec.codecs.base import BaseCodec
from docodec.exceptions import ValidationError
from docodec.options.base import BaseDecodeOptions, BaseEncodeOptions
from docodec.utils.decorators import debug_timer
from docodec.vfile import VFile

logger = logging.getLogger(__name__)

OptionsT = TypeVar("OptionsT", BaseDecodeOptions, BaseEncodeOptions)


def _nested_dataclass_fields(options_class: type) -> dict[str, type]:
    """Map field names of ``options_class`` to the dataclass types they hold.

    ``Optional[X]`` annotations are unwrapped, so ``network: NetworkOptions``
    and ``network: Optional[NetworkOptions]`` both map ``network`` to
    ``NetworkOptions``.
    """
    try:
        type_hints = get_type_hints(options_class)
    except (NameError, TypeError):
        # Annotations naming TYPE_CHECKING-only imports (e.g. ``Fetcher``)
        type_hints = {}

    nested = {}
    for field in fields(options_class):
        if is_dataclass(field.default_factory):
            nested[field.name] = field.default_factory
            continue
        field_type = type_hints.get(field.name, field.type)
        if isinstance(field_type, str):
            continue
        if hasattr(field_type, "__args__"):
            for arg in field_type.__args__:
                if arg is not type(None) and is_dataclass(arg):
                    nested[field.name] = arg
                    break
        elif is_dataclass(field_type):
            nested[field.name] = field_type
    return nested


def _split_nested_kwargs(options_class: type, kwargs: dict[str, Any]) -> tuple[dict[str, dict], dict[str, Any]]:
    """Group kwargs that belong to nested dataclass fields.

    Returns
    -------
    tuple[dict, dict]
        ``(nested, remaining)`` where ``nested`` maps a nested field name to
        the kwargs for its dataclass

    Examples
    --------
    For ``RemoteDecodeOptions`` with ``{"timeout": 5, "is_standalone": False}``
    this returns ``({"network": {"timeout": 5}}, {"is_standalone": False})``.

    """
    nested: dict[str, dict] = {}
    claimed: set[str] = set()
    for field_name, nested_class in _nested_dataclass_fields(options_class).items():
        names = {f.name for f in fields(nested_class)}
        matching = {k: v for k, v in kwargs.items() if k in names}
        if matching:
            nested[field_name] = matching
        claimed.update(names)

    remaining = {k: v for k, v in kwargs.items() if k not in claimed}
    return nested, remaining


def _create_options_from_kwargs(
    options_class: type[OptionsT],
    options_type_name: str,
    base: Optional[OptionsT] = None,
    **kwargs: Any,
) -> OptionsT:
    """Create (or update) an options object from keyword arguments.

    Parameters
    ----------
    options_class : type
        The options class to instantiate
    options_type_name : str
        Name of the options type for logging ("decode" or "encode")
    base : options, optional
        Existing options to update rather than starting from defaults
    **kwargs
        Option values. Fields of nested option dataclasses (such as the
        ``timeout`` of ``network``) may be given flat. Unknown keys are
        skipped.

    Returns
    -------
    OptionsT
        Options instance

    """
    nested_kwargs, flat_kwargs = _split_nested_kwargs(options_class, kwargs)
    nested_classes = _nested_dataclass_fields(options_class)
    for field_name, values in nested_kwargs.items():
        current = getattr(base, field_name, None) if base is not None else None
        if current is not None:
            flat_kwargs[field_name] = current.create_updated(**values)
        else:
            flat_kwargs[field_name] = nested_classes[field_name](**values)

    option_names = {field.name for field in fields(options_class)}
    valid_kwargs = {k: v for k, v in flat_kwargs.items() if k in option_names}
    missing = [k for k in flat_kwargs if k not in valid_kwargs]
    if missing:
        logger.debug(f"Skipping unknown {options_type_name} options: {missing}")

    if base is not None:
        return base.create_updated(**valid_kwargs) if valid_kwargs else base
    return options_class(**valid_kwargs)


def _resolve_decode_options(
    codec: BaseCodec, options: Optional[BaseDecodeOptions], kwargs: dict[str, Any]
) -> Optional[BaseDecodeOptions]:
    options = codec.coerce_decode_options(options)
    if not kwargs:
        return options
    return _create_options_from_kwargs(codec.decode_options_class, "decode", base=options, **kwargs)


def _resolve_encode_options(
    codec: BaseCodec, options: Optional[BaseEncodeOptions], kwargs: dict[str, Any]
) -> Optional[BaseEncodeOptions]:
    options = codec.coerce_encode_options(options)
    if not kwargs:
        return options
    return _create_options_from_kwargs(codec.encode_options_class, "encode", base=options, **kwargs)


def decode(
    file: VFile,
    content: Optional[str] = None,
    format: Optional[str] = None,
    options: Optional[BaseDecodeOptions] = None,
    **kwargs: Any,
) -> Any:
    """Decode a virtual file to a node.

    Parameters
    ----------
    file : VFile
        The file to decode
    content : str, optional
        File path, URL or raw content used to choose the codec. Defaults to
        the file's path, or its text when it has no path.
    format : str, optional
        Format name or media type; wins over ``content``. Defaults to the
        file's media type.
    options : BaseDecodeOptions, optional
        Decode options. Generic options are adapted to the codec's class.
    **kwargs
        Individual option values, applied on top of ``options``

    Returns
    -------
    Node
        The decoded node

    Raises
    ------
    NoCodecMatchError
        If no codec matches the file
    UnsupportedOperationError
        If the matched codec cannot decode

    Examples
    --------
    >>> decode(vfile.load("# Title"), format="md").title
    'Title'

    """
    if content is None:
        content = file.path
    if content is None and format is None and not file.is_binary:
        content = vfile.dump(file)
    format = format or file.media_type

    codec = match(content, format)
    logger.debug(f"Decoding with codec {codec.name!r}")
    with debug_timer(logger, f"{codec.name} decode"):
        return codec.decode(file, _resolve_decode_options(codec, options, kwargs))


def encode(
    node: Any,
    *,
    file_path: Optional[str] = None,
    format: Optional[str] = None,
    options: Optional[BaseEncodeOptions] = None,
    **kwargs: Any,
) -> VFile:
    """Encode a node to a virtual file.

    Parameters
    ----------
    node : Node
        The node to encode
    file_path : str, optional
        Path the file will be written to; chooses the codec when ``format``
        is not given
    format : str, optional
        Format name or media type to encode to
    options : BaseEncodeOptions, optional
        Encode options. Generic options are adapted to the codec's class.
    **kwargs
        Individual option values, applied on top of ``options``

    Returns
    -------
    VFile
        The encoded file, with ``path`` set to ``file_path``

    Raises
    ------
    ValidationError
        If neither ``file_path`` nor ``format`` is given
    NoCodecMatchError
        If no codec matches
    UnsupportedOperationError
        If the matched codec cannot encode

    """
    if not (file_path or format):
        raise ValidationError(
            'At least one of "file_path" or "format" must be provided',
            parameter_name="format",
            parameter_value=format,
        )

    codec = match(file_path, format, is_output=True)
    logger.debug(f"Encoding with codec {codec.name!r}")
    with debug_timer(logger, f"{codec.name} encode"):
        file = codec.encode(node, _resolve_encode_options(codec, options, kwargs))
    if file_path and file.path is None:
        file.path = file_path
    return file


def load(content: str, format: str, **kwargs: Any) -> Any:
    """Decode a string of content in the given format."""
    return decode(vfile.load(content), format=format, **kwargs)


def dump(node: Any, format: str, **kwargs: Any) -> str:
    """Encode a node to a string in the given format."""
    return vfile.dump(encode(node, format=format, **kwargs))


def read(content: str, format: Optional[str] = None, **kwargs: Any) -> Any:
    """Read a file, URL or raw content and decode it.

    Parameters
    ----------
    content : str
        A file path, a URL, raw content, or ``-`` for standard input
    format : str, optional
        Format to decode as; detected from ``content`` when not given

    """
    file = vfile.read(content)
    hint = None if content == "-" else content
    return decode(file, hint, format, **kwargs)


def write(node: Any, file_path: str, format: Optional[str] = None, **kwargs: Any) -> VFile:
    """Encode a node and write it to ``file_path`` (``-`` for standard output)."""
    if file_path == "-" and format is None:
        raise ValidationError("A format is required when writing to standard output", parameter_name="format")
    file = encode(node, file_path=None if file_path == "-" else file_path, format=format, **kwargs)
    vfile.write(file, file_path)
    return file


def convert(
    input: str,
    output_path: Optional[str] = None,
    *,
    to: Optional[str] = None,
    from_: Optional[str] = None,
    options: Optional[dict[str, Any]] = None,
    decode_options: Optional[BaseDecodeOptions] = None,
    encode_options: Optional[BaseEncodeOptions] = None,
) -> Union[str, None]:
    """Convert content from one format to another.

    Parameters
    ----------
    input : str
        File path, URL, raw content, or ``-`` for standard input
    output_path : str, optional
        File path to write to (``-`` for standard output)
    to : str, optional
        Format to convert to; detected from ``output_path`` when not given
    from_ : str, optional
        Format to convert from; detected from ``input`` when not given
    options : dict, optional
        Option values shared by the decode and encode steps, for example
        ``{"is_standalone": False, "timeout": 5}``. Each step takes the keys
        its codec's options class knows.
    decode_options, encode_options : optional
        Options objects for each step; ``options`` values are applied on top

    Returns
    -------
    str or None
        The converted content, or for binary formats the output path

    Examples
    --------
    Convert Markdown to an HTML fragment:
        >>> html = convert("# Title\\n\\nSome *text*.", to="html", from_="md", options={"is_standalone": False})

    Convert a JATS file to PDF:
        >>> convert("article.jats", "article.pdf")
        'article.pdf'

    """
    options = options or {}
    node = read(input, from_, options=decode_options, **options)
    output = None if output_path == "-" else output_path
    if output is None and to is None:
        raise ValidationError('At least one of "output_path" or "to" must be provided', parameter_name="to")

    file = encode(node, file_path=output, format=to, options=encode_options, **options)
    if output_path:
        vfile.write(file, output_path)
    if file.is_binary:
        return file.path
    return vfile.dump(file)
