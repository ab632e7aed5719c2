"""Fish completion script generator."""

from __future__ import annotations

from .common import COMPLETE_COMMAND, SCRIPT_DEBUG_ENV_VAR, comment_safe, directive_variables, fish_quote, sanitize_identifier

__all__ = ["generate_fish"]


def generate_fish(program_name: str, exec_invocation: str) -> str:
    """Generate the fish completion script.

    Args:
        program_name: Command the completion is registered for
        exec_invocation: Shell text running the program

    Returns:
        The fish completion script content
    """
    ident = sanitize_identifier(program_name)
    name = fish_quote(program_name)
    request = fish_quote(f"{exec_invocation} {COMPLETE_COMMAND} --")
    directives = directive_variables("set -l shellCompDirective{name} {value}")

    return rf"""# fish completion for {comment_safe(program_name)}                 -*- shell-script -*-
# Generated by: {comment_safe(program_name)} {COMPLETE_COMMAND} fish

function __{ident}_debug
    set -l file "${SCRIPT_DEBUG_ENV_VAR}"
    if test -n "$file"
        echo "$argv" >> $file
    end
end

function __{ident}_perform_completion
    __{ident}_debug "Starting __{ident}_perform_completion"

    # the words before the cursor, then the one under it
    set -l args (commandline -opc)
    set -l lastArg (string escape -- (commandline -ct))

    __{ident}_debug "args: $args"
    __{ident}_debug "last arg: $lastArg"

    set -l requestComp {request}
    for arg in $args[2..-1]
        set requestComp "$requestComp "(string escape -- $arg)
    end
    if test -z "$lastArg"
        # the cursor follows a space
        set requestComp "$requestComp ''"
    else
        set requestComp "$requestComp $lastArg"
    end

    __{ident}_debug "Calling $requestComp"
    set -l results (eval $requestComp 2> /dev/null)

    # drop trailing empty lines
    while test (count $results) -gt 0; and not string length -q -- (string trim -- $results[-1])
        set -e results[-1]
    end

    # the last line is the directive
    if test (count $results) -eq 0; or not string match -qr '^:[0-9]+$' -- $results[-1]
        __{ident}_debug "No directive received, the program probably failed"
        return
    end
    printf "%s\n" $results
end

# Both registrations below need the response for the current command line: ask once
function __{ident}_perform_completion_once
    __{ident}_debug "Starting __{ident}_perform_completion_once"

    if test -n "$__{ident}_perform_completion_once_result"
        __{ident}_debug "Seems like a valid result already exists, skipping __{ident}_perform_completion"
        return 0
    end

    set --global __{ident}_perform_completion_once_result (__{ident}_perform_completion)
    if test -z "$__{ident}_perform_completion_once_result"
        __{ident}_debug "No completions, probably due to a failure"
        return 1
    end
    return 0
end

function __{ident}_clear_perform_completion_once_result
    __{ident}_debug ""
    __{ident}_debug "========= clearing previously set __{ident}_perform_completion_once_result variable =========="
    set --erase __{ident}_perform_completion_once_result
    __{ident}_debug "Successfully erased the variable __{ident}_perform_completion_once_result"
    # used as a condition: must never add completions itself
    return 1
end

function __{ident}_directive_has
    # usage: __{ident}_directive_has <directive> <bit>
    test (math (math --scale 0 $argv[1] / $argv[2]) % 2) -ne 0
end

function __{ident}_requires_order_preservation
    __{ident}_debug ""
    __{ident}_debug "========= checking if order preservation is required =========="

    __{ident}_perform_completion_once
    if test -z "$__{ident}_perform_completion_once_result"
        __{ident}_debug "Error determining if order preservation is required"
        return 1
    end

{directives}
    set -l directive (string sub --start 2 $__{ident}_perform_completion_once_result[-1])
    __{ident}_debug "Directive is: $directive"

    __{ident}_directive_has $directive $shellCompDirectiveKeepOrder
end

# Fills $__{ident}_comp_results. A false status lets fish complete files.
function __{ident}_prepare_completions
    __{ident}_debug ""
    __{ident}_debug "========= starting completion logic =========="

    set --erase __{ident}_comp_results

    __{ident}_perform_completion_once
    __{ident}_debug "Completion results: $__{ident}_perform_completion_once_result"

    if test -z "$__{ident}_perform_completion_once_result"
        __{ident}_debug "No completion, probably due to a failure"
        return 1
    end

{directives}
    set -l directive (string sub --start 2 $__{ident}_perform_completion_once_result[-1])
    set --global __{ident}_comp_results $__{ident}_perform_completion_once_result[1..-2]

    __{ident}_debug "Completions are: $__{ident}_comp_results"
    __{ident}_debug "Directive is: $directive"

    if __{ident}_directive_has $directive $shellCompDirectiveError
        __{ident}_debug "Received error directive, showing nothing"
        set --erase __{ident}_comp_results
        return 0
    end

    set -l token (commandline -ct)

    if __{ident}_directive_has $directive $shellCompDirectiveFilterFileExt
        # the candidates are file extensions
        set -l files
        for comp in $__{ident}_comp_results
            set -l ext (string replace -r '^\.' '' -- (string split -m 1 \t -- $comp)[1])
            set -a files $token*.$ext
        end
        set -a files $token*/
        set --global __{ident}_comp_results $files
        return 0
    end

    if __{ident}_directive_has $directive $shellCompDirectiveFilterDirs
        set -l subdir (string split -m 1 \t -- "$__{ident}_comp_results[1]")[1]
        set -l dirs
        if test -n "$subdir"
            __{ident}_debug "Listing directories in $subdir"
            set -l base (string trim -r -c / -- $subdir)
            set dirs $base/$token*/
            set dirs (string replace -- "$base/" '' $dirs)
        else
            set dirs $token*/
        end
        set --global __{ident}_comp_results $dirs
        return 0
    end

    if __{ident}_directive_has $directive $shellCompDirectiveNoSpace; and test (count $__{ident}_comp_results) -eq 1
        # fish appends a space to a lone candidate: add a longer second one so only the common prefix is inserted
        set -l split (string split --max 1 \t $__{ident}_comp_results[1])
        set --global __{ident}_comp_results $split[1] $split[1].
        __{ident}_debug "Adding second completion to prevent the space: $__{ident}_comp_results"
    end

    if test (count $__{ident}_comp_results) -eq 0; and not __{ident}_directive_has $directive $shellCompDirectiveNoFileComp
        __{ident}_debug "No candidates, letting fish complete files"
        return 1
    end
    return 0
end

# Remove any previous completion for the program: this script provides all of them
complete -c {name} -e

# Registered first, so evaluated after the two below: clears the cached response
complete -c {name} -n '__{ident}_clear_perform_completion_once_result'
complete -c {name} -n 'not __{ident}_requires_order_preservation && __{ident}_prepare_completions' -f -a '$__{ident}_comp_results'
complete -k -c {name} -n '__{ident}_requires_order_preservation && __{ident}_prepare_completions' -f -a '$__{ident}_comp_results'
"""
