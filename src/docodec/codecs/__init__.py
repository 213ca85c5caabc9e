#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/__init__.py
"""Codec modules, one per format.

Each module defines a ``BaseCodec`` subclass and a ``CODEC_METADATA`` object
describing it. Modules are not imported here: the codec registry imports
them on demand, in the order given by ``codec_registry.CODEC_MODULES``, so
that a codec whose optional dependencies are missing never breaks the
others.
"""
