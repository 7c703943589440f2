"""osmsieve rules: validate a rule file and show how it is understood."""

from __future__ import annotations

import typer

from osmsieve.cli import _exitcodes as ec
from osmsieve.cli._output import print_error, print_mapping, print_rows
from osmsieve.errors import ConfigurationError
from osmsieve.tags import PresenceRule, SetRule, ValueRule, load_matcher


def _describe(rule: PresenceRule | ValueRule | SetRule) -> tuple[str, str]:
    match rule:
        case PresenceRule(enabled=True):
            return "present", "*"
        case PresenceRule():
            return "disabled", "-"
        case ValueRule():
            return "equals", rule.value
        case SetRule():
            return "one of", ", ".join(sorted(rule.values))


def rules_cmd(
    tags: str = typer.Option(
        "tags.yaml", "--tags", "-t", envvar="OSMSIEVE_TAGS", help="YAML rule file"
    ),
) -> None:
    """Validate a rule file and list its rules."""
    from osmsieve.cli import state

    try:
        matcher = load_matcher(tags)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    if state.json_output:
        print_mapping(matcher.to_config(), json_mode=True)
        return
    if not matcher.rules:
        print("No rules: nothing will be selected.")
        return
    rows = [[rule.key, *_describe(rule)] for rule in matcher.rules]
    print_rows(["key", "test", "value"], rows)
