"""Completion resolution engine.

Maps the words typed so far to an ordered list of candidates and one
directive. Rules are tried in order, the first one that applies wins:

1. completing the value of an option (``--port <TAB>``, ``--port=<TAB>``)
2. completing an option name (``--p<TAB>``)
3. walking the subcommands to find the command being completed
4. suggesting subcommands and/or the value of the next positional argument
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..commands.parsing import END_OF_OPTIONS, find_option, parse_option_token, visible_options
from ..commands.tree import validate_tree
from ..logging_setup import get_logger
from ..models import Candidate, CompletionResult, Directive

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..commands.models import CommandNode, Completer

__all__ = ["CommandContext", "CommandLine", "resolve", "resolve_sync", "split_command_line", "walk_command_path"]

log = get_logger("shelltab.engine")

_FILTERS = Directive.FILTER_FILE_EXT | Directive.FILTER_DIRS


@dataclass
class CommandLine:
    """The request split into committed words and the word under the cursor."""

    previous_args: list[str]
    to_complete: str
    ends_with_space: bool


@dataclass
class CommandContext:
    """What the committed words say about the command being typed."""

    node: CommandNode
    positionals: list[str] = field(default_factory=list)
    supplied: set[str] = field(default_factory=set)  # long names of options already given
    options_ended: bool = False  # a bare "--" was typed


def split_command_line(raw_args: Sequence[str]) -> CommandLine:
    """Apply the framing of the completion request.

    A trailing empty string means the cursor follows a space: nothing is
    being typed and every other word is committed.
    """
    args = list(raw_args)
    ends_with_space = bool(args) and args[-1] == ""
    if ends_with_space:
        args.pop()
    to_complete = "" if ends_with_space or not args else args.pop()
    return CommandLine(previous_args=args, to_complete=to_complete, ends_with_space=ends_with_space)


def walk_command_path(root: CommandNode, previous_args: Sequence[str]) -> CommandContext:
    """Find the command reached by the committed words.

    Option tokens are skipped along with their separate value. Words
    naming a subcommand descend the tree until the first word that does
    not; that word and every later plain word are positional values.
    """
    context = CommandContext(node=root)
    descending = True
    index = 0
    while index < len(previous_args):
        word = previous_args[index]
        index += 1
        if context.options_ended:
            context.positionals.append(word)
            continue
        if word == END_OF_OPTIONS:
            context.options_ended = True
            continue
        token = parse_option_token(word)
        if token is not None:
            option = find_option(context.node, token.flag)
            if option is None:
                continue
            context.supplied.add(option.name)
            if option.takes_value and token.value is None and index < len(previous_args):
                if parse_option_token(previous_args[index]) is None:
                    index += 1  # its value
            continue
        child = context.node.children.get(word) if descending else None
        if child is not None:
            context.node = child
        else:
            descending = False
            context.positionals.append(word)
    return context


async def _run_completer(
    completer: Completer | None, previous_args: list[str], to_complete: str
) -> tuple[list[Candidate], Directive | None]:
    """Call a completer.

    A completer returning a `CompletionResult` chooses its own directive;
    for any other iterable the directive is left to the calling rule (None).
    Failures are logged and count as no candidates.
    """
    if completer is None:
        return [], None
    try:
        produced = completer(list(previous_args), to_complete)
        if inspect.isawaitable(produced):
            produced = await produced
        if isinstance(produced, CompletionResult):
            return [Candidate.coerce(item) for item in produced.candidates], produced.directive
        return [Candidate.coerce(item) for item in produced or ()], None
    except Exception:  # noqa: BLE001  # pylint: disable=broad-exception-caught
        log.debug("Completer %r failed for %r", completer, to_complete, exc_info=True)
        return [], None


def _with_directive(candidates: list[Candidate], directive: Directive | None) -> CompletionResult:
    if directive is None:
        return CompletionResult.explicit(candidates)
    return CompletionResult(candidates, directive)


async def _complete_option_value(line: CommandLine, context: CommandContext) -> CompletionResult | None:
    """Rule 1: the word is the value of an option."""
    if context.options_ended:
        return None

    inline = parse_option_token(line.to_complete)
    if inline is not None and inline.value is not None:
        option = find_option(context.node, inline.flag)
        if option is None or not option.takes_value:
            log.debug("No value to complete for %s", inline.flag)
            return CompletionResult.empty()
        candidates, directive = await _run_completer(option.completer, line.previous_args, inline.value)
        if directive is not None and directive & _FILTERS:
            return CompletionResult(candidates, directive)  # filters, not values
        candidates = [candidate.with_prefix(f"{inline.flag}=") for candidate in candidates]
        return _with_directive(candidates, directive)

    if not line.previous_args:
        return None
    last = parse_option_token(line.previous_args[-1])
    if last is None or last.value is not None:
        return None
    option = find_option(context.node, last.flag)
    if option is None:
        log.debug("Unknown option %s", last.flag)
        # a dash-prefixed word is an option name, not this option's value
        return None if line.to_complete.startswith("-") else CompletionResult.empty()
    if not option.takes_value:
        return None
    return _with_directive(*await _run_completer(option.completer, line.previous_args, line.to_complete))


def _complete_option_name(line: CommandLine, context: CommandContext) -> CompletionResult | None:
    """Rule 2: the word is the start of an option name."""
    if context.options_ended or not line.to_complete.startswith("-"):
        return None
    matches: list[tuple[str, bool, str]] = []
    for option in visible_options(context.node):
        if option.name in context.supplied:
            continue
        form = option.match(line.to_complete)
        if form is not None:
            matches.append((form, option.required, option.description))
    if any(required for _, required, _ in matches):
        matches = [match for match in matches if match[1]]
    return CompletionResult([Candidate(form, description) for form, _, description in matches], Directive.NO_FILE_COMP)


async def _complete_command_or_positional(line: CommandLine, context: CommandContext) -> CompletionResult:
    """Rule 4: subcommands of the resolved command, then its next positional."""
    node = context.node
    bound = len(context.positionals)
    candidates: list[Candidate] = []
    if bound == 0 and not context.options_ended:
        candidates.extend(
            Candidate(name, child.description) for name, child in node.children.items() if name.startswith(line.to_complete)
        )

    directive: Directive | None = None
    positional = node.positional_at(bound)
    if positional is not None:
        produced, directive = await _run_completer(positional.completer, line.previous_args, line.to_complete)
        if directive is not None and directive & _FILTERS:
            return CompletionResult(produced, directive)
        seen = {candidate.value for candidate in candidates}
        for candidate in produced:
            if candidate.value not in seen:
                seen.add(candidate.value)
                candidates.append(candidate)
    elif not candidates:
        log.debug("Nothing to complete at position %d of '%s'", bound, node.full_name)
    return _with_directive(candidates, directive)


async def resolve(root: CommandNode, raw_args: Sequence[str]) -> CompletionResult:
    """Compute the completions for a request.

    Args:
        root: The command tree
        raw_args: Every word after the program's ``complete --`` marker

    Returns:
        The candidates, in the order the winning rule produced them, and the directive

    Raises:
        TreeConfigurationError: If the tree is malformed
    """
    validate_tree(root)
    line = split_command_line(raw_args)
    context = walk_command_path(root, line.previous_args)
    log.debug("Completing %r after %r in '%s'", line.to_complete, line.previous_args, context.node.full_name)

    result = await _complete_option_value(line, context)
    if result is None:
        result = _complete_option_name(line, context)
    if result is None:
        result = await _complete_command_or_positional(line, context)
    return result


def resolve_sync(root: CommandNode, raw_args: Sequence[str]) -> CompletionResult:
    """Blocking version of `resolve`, for callers without an event loop."""
    return asyncio.run(resolve(root, raw_args))
