"""
Parsing and cross-validation of action inputs into resolved options.
"""

import json
import logging
from typing import List, Mapping, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

from ..models.tool import (
    CabalOpt,
    Defaults,
    GeneralOpt,
    GhcupOpt,
    MatcherOpt,
    OS,
    Options,
    ProgramOpt,
    StackOpt,
    Tool,
    VersionDefault,
)
from .errors import ConfigurationError, InputParseError
from .resolver import resolve
from .version_table import VersionTable

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")

_URL_ADAPTER = TypeAdapter(AnyUrl)


def get_defaults(os: OS, table: VersionTable, default_tokens: Optional[Mapping[Tool, str]] = None) -> Defaults:
    """
    Build per-tool defaults by resolving the default tokens quietly.

    Args:
        os: Runner OS
        table: Version table
        default_tokens: Default token per tool, ``latest`` when missing

    Returns:
        Defaults for every tool
    """
    tokens = dict(default_tokens or {})

    def mk_version(tool: Tool) -> VersionDefault:
        supported = table.supported(tool)
        return VersionDefault(
            version=resolve(tokens.get(tool, "latest"), supported, tool, os, verbose=False),
            supported=supported,
        )

    return Defaults(
        ghc=mk_version(Tool.GHC),
        cabal=mk_version(Tool.CABAL),
        stack=mk_version(Tool.STACK),
        general=GeneralOpt(matcher=MatcherOpt(enable=True)),
    )


def parse_yaml_boolean(name: str, value: str) -> bool:
    """
    Convert an input to a boolean following the YAML 1.2 core schema.

    Args:
        name: Input name, used in the error message
        value: Raw input value

    Returns:
        Parsed boolean

    Raises:
        InputParseError: If the value is not a canonical spelling
    """
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise InputParseError(
        name,
        f'Action input "{name}" does not meet YAML 1.2 "Core Schema" specification: {value!r}\n'
        "Supported boolean values: `true | True | TRUE | false | False | FALSE`"
    )


def parse_boolean_input(inputs: Mapping[str, str], name: str, default: bool) -> bool:
    value = inputs.get(name)
    return parse_yaml_boolean(name, value) if value else default


def parse_opposite_boolean_inputs(inputs: Mapping[str, str], positive: str, negative: str) -> bool:
    """
    Reconcile a positive option (default true) with its negative alias
    (default false) and return the positive value.

    Raises:
        InputParseError: If both are set and contradict each other
    """
    if not inputs.get(negative):
        return parse_boolean_input(inputs, positive, True)
    if not inputs.get(positive):
        return not parse_boolean_input(inputs, negative, False)

    pos = parse_boolean_input(inputs, positive, True)
    neg = parse_boolean_input(inputs, negative, False)
    if pos == (not neg):
        return pos
    raise InputParseError(
        positive,
        f"Action input {positive}: {str(pos).lower()} contradicts {negative}: {str(neg).lower()}"
    )


def parse_url(name: str, value: Optional[str]) -> Optional[AnyUrl]:
    """Parse an absolute URL; an empty value means unset."""
    if not value:
        return None
    try:
        return _URL_ADAPTER.validate_python(value.strip())
    except ValidationError as e:
        raise InputParseError(name, f'Action input "{name}" is not a valid URL: {value!r}') from e


def parse_release_channels(inputs: Mapping[str, str]) -> List[AnyUrl]:
    """
    Collect ghcup release channels, structured list first, legacy input last.

    Raises:
        InputParseError: On the first malformed URL
    """
    channels: List[AnyUrl] = []
    for line in (inputs.get("ghcup-release-channels") or "").splitlines():
        if not line.strip():
            continue
        channels.append(parse_url("ghcup-release-channels", line))

    legacy = inputs.get("ghcup-release-channel")
    if legacy:
        logger.warning("ghcup-release-channel is deprecated in favor of ghcup-release-channels")
        channels.append(parse_url("ghcup-release-channel", legacy))
    return channels


def get_opts(defaults: Defaults, os: OS, inputs: Mapping[str, str]) -> Options:
    """
    Merge defaults and raw inputs into fully resolved options.

    Malformed booleans and URLs fail immediately; contradicting inputs are
    collected and reported together.

    Args:
        defaults: Per-tool defaults from :func:`get_defaults`
        os: Runner OS
        inputs: Raw action inputs keyed by input name

    Returns:
        Immutable resolved options

    Raises:
        InputParseError: A single input is malformed
        ConfigurationError: Inputs contradict each other
    """
    logger.debug(f"Inputs are: {json.dumps(dict(inputs))}")

    ghc_version = inputs.get("ghc-version") or ""
    cabal_version = inputs.get("cabal-version") or ""
    stack_version = inputs.get("stack-version") or ""

    stack_no_global = parse_boolean_input(inputs, "stack-no-global", False)
    stack_setup_ghc = parse_boolean_input(inputs, "stack-setup-ghc", False)
    stack_default = stack_no_global or stack_setup_ghc or bool(stack_version)
    stack_enable = parse_boolean_input(inputs, "enable-stack", stack_default)
    ghc_enable = not stack_no_global
    cabal_enable = not stack_no_global
    cabal_update = parse_boolean_input(inputs, "cabal-update", cabal_enable)
    # disable-matcher is kept for backwards compatibility
    matcher_enable = parse_opposite_boolean_inputs(inputs, "enable-matcher", "disable-matcher")
    release_channels = parse_release_channels(inputs)

    errors = []
    if not stack_enable:
        if stack_no_global:
            errors.append("Action input `enable-stack: false` contradicts `stack-no-global: true`")
        if stack_setup_ghc:
            errors.append("Action input `enable-stack: false` contradicts `stack-setup-ghc: true`")
        if stack_version:
            errors.append("Action input `enable-stack: false` contradicts setting `stack-version`")
    if stack_no_global:
        if ghc_version:
            errors.append("Action input `stack-no-global: true` contradicts setting `ghc-version`")
        if cabal_version:
            errors.append("Action input `stack-no-global: true` contradicts setting `cabal-version`")
    if errors:
        raise ConfigurationError(errors)

    def program(tool: Tool, requested: str, enable: bool) -> dict:
        default = defaults.for_tool(tool)
        raw = requested or default.version
        return {
            "raw": raw,
            # Inform about the resolution only for tools that get installed
            "resolved": resolve(raw, default.supported, tool, os, verbose=enable),
            "enable": enable,
        }

    opts = Options(
        ghc=ProgramOpt(**program(Tool.GHC, ghc_version, ghc_enable)),
        cabal=CabalOpt(**program(Tool.CABAL, cabal_version, cabal_enable), update=cabal_update),
        stack=StackOpt(**program(Tool.STACK, stack_version, stack_enable), setup=stack_setup_ghc),
        ghcup=GhcupOpt(release_channels=tuple(release_channels)),
        general=GeneralOpt(matcher=MatcherOpt(enable=matcher_enable)),
    )
    logger.debug(f"Options are: {opts.model_dump_json()}")
    return opts
