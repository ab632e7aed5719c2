"""Zsh completion script generator."""

from __future__ import annotations

import shlex

from .common import COMPLETE_COMMAND, SCRIPT_DEBUG_ENV_VAR, comment_safe, directive_variables, double_quote_escape, sanitize_identifier

__all__ = ["generate_zsh"]


def generate_zsh(program_name: str, exec_invocation: str) -> str:
    """Generate the zsh completion script.

    The script can be sourced (it registers itself with ``compdef``) or
    installed as ``_<program>`` in a ``$fpath`` directory.

    Args:
        program_name: Command the completion is registered for
        exec_invocation: Shell text running the program

    Returns:
        The zsh completion script content
    """
    ident = sanitize_identifier(program_name)
    name = shlex.quote(program_name)
    request = double_quote_escape(f"{exec_invocation} {COMPLETE_COMMAND} --")
    directives = directive_variables("local shellCompDirective{name}={value}")

    return rf"""#compdef {name}
# zsh completion for {comment_safe(program_name)}                  -*- shell-script -*-
# Generated by: {comment_safe(program_name)} {COMPLETE_COMMAND} zsh

__{ident}_debug()
{{
    local file="${SCRIPT_DEBUG_ENV_VAR}"
    if [[ -n ${{file}} ]]; then
        echo "$*" >> "${{file}}"
    fi
}}

_{ident}()
{{
{directives}

    local requestComp out directive directiveLine arg comp value description noSpace keepOrder subdir
    local tab=$'\t'
    local -a completions

    __{ident}_debug "\n========= starting completion logic =========="
    __{ident}_debug "CURRENT: ${{CURRENT}}, words[*]: ${{words[*]}}"

    # the cursor may be in the middle of the line: ignore what follows it
    words=("${{(@)words[1,CURRENT]}}")

    requestComp="{request}"
    for arg in "${{(@)words[2,-1]}}"; do
        arg=${{(Q)arg}}
        if [[ -z ${{arg}} ]]; then
            requestComp+=" ''"
        else
            requestComp+=" ${{(qq)arg}}"
        fi
    done

    __{ident}_debug "About to call: eval ${{requestComp}}"
    out=$(eval "${{requestComp}}" 2>/dev/null)

    # the last line is the directive
    directiveLine=${{out##*$'\n'}}
    if [[ ${{directiveLine}} == "${{out}}" ]]; then
        out=""
    else
        out=${{out%$'\n'*}}
    fi
    if [[ ${{directiveLine}} =~ '^:[0-9]+$' ]]; then
        directive=${{directiveLine#:}}
    else
        __{ident}_debug "No directive received, the program probably failed"
        directive=0
        out=""
    fi
    __{ident}_debug "directive: ${{directive}}"
    __{ident}_debug "completions: ${{out}}"

    if (( directive & shellCompDirectiveError )); then
        __{ident}_debug "Received error directive, showing nothing"
        return 1
    fi

    for comp in "${{(@f)out}}"; do
        [[ -z ${{comp}} ]] && continue
        value=${{comp%%${{tab}}*}}
        description=""
        if [[ ${{comp}} == *${{tab}}* ]]; then
            description=${{comp#*${{tab}}}}
        fi
        # _describe splits value and description on the first unescaped ":"
        value=${{value//:/\\:}}
        completions+=("${{value}}${{description:+:${{description}}}}")
    done

    if (( directive & shellCompDirectiveNoSpace )); then
        noSpace="-S ''"
    fi
    if (( directive & shellCompDirectiveKeepOrder )); then
        keepOrder="-V"
    fi

    if (( directive & shellCompDirectiveFilterFileExt )); then
        # the candidates are file extensions
        local -a extensions
        for comp in "${{completions[@]}}"; do
            comp=${{comp%%:*}}
            extensions+=("${{comp#.}}")
        done
        if (( ${{#extensions}} )); then
            _files -g "*.(${{(j:|:)extensions}})"
        else
            _files
        fi
    elif (( directive & shellCompDirectiveFilterDirs )); then
        subdir=${{completions[1]%%:*}}
        if [[ -n ${{subdir}} ]]; then
            __{ident}_debug "Listing directories in ${{subdir}}"
            _files -W "${{subdir}}" -/
        else
            _files -/
        fi
    else
        if (( ${{#completions}} )) && eval _describe ${{keepOrder}} "'completions'" completions ${{noSpace}}; then
            __{ident}_debug "_describe found some completions"
            return 0
        fi
        if (( directive & shellCompDirectiveNoFileComp )); then
            __{ident}_debug "No file completion"
            return 1
        fi
        _files
    fi
}}

if [[ ${{zsh_eval_context[-1]}} == loadautofunc ]]; then
    # autoloaded from $fpath
    _{ident} "$@"
else
    # sourced
    compdef _{ident} {name}
fi
"""
