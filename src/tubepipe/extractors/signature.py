"""Signature decryption for cipher-protected stream urls.

The player script carries an obfuscated function that scrambles the
signature token with a handful of helper-object calls. Rather than
re-implementing the transform, the function and its helper object are cut
out of the script, wrapped into a small program, and evaluated through the
host's script capability.
"""

import json
import logging
import re
from dataclasses import dataclass

from ..api.base import Downloader
from ..core.errors import ParsingError
from ..core.parsing import parse_query_map

logger = logging.getLogger(__name__)

# Canonical name of the wrapper the evaluated call targets
DECRYPTION_FUNC_NAME = "decrypt"

# Patterns naming the signature function, tried in order. Group "sig" holds
# the function identifier.
SIGNATURE_FUNCTION_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(
        r'(?:\b|[^a-zA-Z0-9$])(?P<sig>[a-zA-Z0-9$]{2})\s*=\s*function\(\s*a\s*\)'
        r'\s*\{\s*a\s*=\s*a\.split\(\s*""\s*\)'
    ),
    re.compile(r'(?P<sig>[\w$]+)\s*=\s*function\((\w+)\)\{\s*\2=\s*\2\.split\(""\)\s*;'),
    re.compile(r'\b(?P<sig>[\w$]{2})\s*=\s*function\((\w+)\)\{\s*\2=\s*\2\.split\(""\)\s*;'),
    re.compile(
        r"yt\.akamaized\.net/\)\s*\|\|\s*.*?\s*c\s*&&\s*d\.set\([^,]+\s*,\s*"
        r"(?:encodeURIComponent\s*\()?\s*(?P<sig>[a-zA-Z0-9$]+)\("
    ),
    re.compile(
        r"\bc\s*&&\s*d\.set\([^,]+\s*,\s*(?:encodeURIComponent\s*\()?\s*(?P<sig>[a-zA-Z0-9$]+)\("
    ),
)

# Helper object referenced from the function body as ";Xy.ab("
_HELPER_NAME_RE = re.compile(r";([A-Za-z0-9_$]{2})\...\(")


@dataclass(frozen=True)
class DecryptionProgram:
    """Executable text: helper object, signature function and a fixed-name caller."""

    function_name: str
    source: str

    def call(self, token: str) -> str:
        """Program text followed by a call decrypting ``token``."""
        # json.dumps yields a valid script string literal
        return f"{self.source};{DECRYPTION_FUNC_NAME}({json.dumps(token)})"

    def __str__(self) -> str:
        return self.source


@dataclass(frozen=True)
class CipherParams:
    """Fields of a ``signatureCipher`` blob.

    Missing fields are empty strings.
    """

    url: str = ""
    sp: str = ""
    s: str = ""

    @classmethod
    def parse(cls, cipher: str) -> "CipherParams":
        params = parse_query_map(cipher or "")
        return cls(url=params.get("url", ""), sp=params.get("sp", ""), s=params.get("s", ""))


def find_function_name(player_script: str) -> str | None:
    """Return the signature function identifier from the first matching pattern."""
    for index, pattern in enumerate(SIGNATURE_FUNCTION_PATTERNS):
        match = pattern.search(player_script)
        if match:
            logger.debug(f"Signature function {match.group('sig')!r} found by pattern {index}")
            return match.group("sig")
    return None


def _match_group1(pattern: str, text: str, what: str) -> str:
    match = re.search(pattern, text)
    if not match:
        raise ParsingError(f"Cannot find {what}")
    return match.group(1)


def locate_program(player_script: str) -> DecryptionProgram:
    """Assemble the decryption program from the player script.

    Raises:
        ParsingError: the function, its body, or its helper object cannot be found.
    """
    function_name = find_function_name(player_script)
    if not function_name:
        raise ParsingError("Cannot find decryption function")

    # First closing brace ends the body; nested braces would cut it short
    function_pattern = rf"({re.escape(function_name)}=function\([a-zA-Z0-9_]+\)\{{.+?\}})"
    decryption_func = "var {};".format(
        _match_group1(function_pattern, player_script, f"body of {function_name}")
    )

    helper_match = _HELPER_NAME_RE.search(decryption_func)
    if not helper_match:
        raise ParsingError(f"Cannot find helper object used by {function_name}")
    helper_name = helper_match.group(1)

    helper_pattern = rf"(var {re.escape(helper_name)}=\{{.+?\}}\}};)"
    helper_object = _match_group1(
        helper_pattern, player_script.replace("\n", ""), f"helper object {helper_name}"
    )

    caller_function = f"function {DECRYPTION_FUNC_NAME}(a){{return {function_name}(a);}}"
    return DecryptionProgram(
        function_name=function_name,
        source=helper_object + decryption_func + caller_function,
    )


def decrypt(downloader: Downloader, program: DecryptionProgram, token: str) -> str:
    """Run ``program`` on ``token`` through the downloader's script capability.

    An evaluation failure yields an empty string.
    """
    result = downloader.evaluate_script(program.call(token))
    if not result:
        logger.warning(f"Signature decryption returned nothing for token of length {len(token)}")
        return ""
    return result
