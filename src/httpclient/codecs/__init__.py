"""
Content codecs and the registry that maps MIME types to them.

    from httpclient.codecs import register, Codec

    class ReverseCodec(Codec):
        def parse(self, body):
            return self.to_text(body)[::-1]

    register("application/vnd.acme.reversed+plain", ReverseCodec())
"""

from .base import Codec
from .csv_codec import CsvCodec
from .form_codec import FormCodec
from .json_codec import JsonCodec
from .xml_codec import XmlCodec
from .registry import (
    CodecRegistry,
    default_registry,
    register,
    has_registered,
    get_codec,
)

__all__ = [
    "Codec",
    "JsonCodec",
    "XmlCodec",
    "CsvCodec",
    "FormCodec",
    "CodecRegistry",
    "default_registry",
    "register",
    "has_registered",
    "get_codec",
]
