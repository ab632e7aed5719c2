"""Bash completion script generator."""

from __future__ import annotations

import shlex

from .common import COMPLETE_COMMAND, SCRIPT_DEBUG_ENV_VAR, comment_safe, directive_variables, double_quote_escape, sanitize_identifier

__all__ = ["generate_bash"]


def generate_bash(program_name: str, exec_invocation: str) -> str:
    """Generate the bash completion script.

    The script asks the program for completions on every Tab press and
    applies the returned directive. Works with and without the
    bash-completion package.

    Args:
        program_name: Command the completion is registered for
        exec_invocation: Shell text running the program, e.g. "/usr/bin/node /opt/cli.js"

    Returns:
        The bash completion script content
    """
    ident = sanitize_identifier(program_name)
    request = double_quote_escape(f"{exec_invocation} {COMPLETE_COMMAND} --")
    directives = directive_variables("local shellCompDirective{name}={value}")

    return rf"""# bash completion for {comment_safe(program_name)}                 -*- shell-script -*-
# Generated by: {comment_safe(program_name)} {COMPLETE_COMMAND} bash

__{ident}_debug()
{{
    if [[ -n ${{{SCRIPT_DEBUG_ENV_VAR}-}} ]]; then
        echo "$*" >> "${{{SCRIPT_DEBUG_ENV_VAR}}}"
    fi
}}

# Splits the line up to the cursor on unquoted blanks, words keep their quotes
__{ident}_split_line()
{{
    local point=${{COMP_POINT:-${{#COMP_LINE}}}}
    local line="${{COMP_LINE:0:point}}" word="" quote="" c i
    words=()
    for (( i = 0; i < ${{#line}}; i++ )); do
        c="${{line:i:1}}"
        if [[ ${{c}} == \\ && ${{quote}} != "'" ]]; then
            word+="${{c}}${{line:i+1:1}}"
            (( i++ ))
        elif [[ -n ${{quote}} ]]; then
            [[ ${{c}} == "${{quote}}" ]] && quote=""
            word+="${{c}}"
        elif [[ ${{c}} == [\"\'] ]]; then
            quote="${{c}}"
            word+="${{c}}"
        elif [[ ${{c}} == [[:space:]] ]]; then
            [[ -n ${{word}} ]] && words+=("${{word}}")
            word=""
        else
            word+="${{c}}"
        fi
    done
    words+=("${{word}}")
    cword=$(( ${{#words[@]}} - 1 ))
    cur="${{words[cword]}}"
}}

# Sets cur, words and cword, keeping "--opt=value" in a single word
__{ident}_init_completion()
{{
    COMPREPLY=()
    if declare -F _get_comp_words_by_ref >/dev/null 2>&1; then
        _get_comp_words_by_ref -n "=:" cur words cword
    else
        __{ident}_split_line
    fi
}}

# Sets dequoted to the word without its shell quoting.
# Words that could expand are passed on as typed.
__{ident}_dequote()
{{
    local word="$1" unsafe='[$`;&|<>()]'
    dequoted="${{word}}"
    if [[ ${{word}} != *[\\\"\']* || ${{word}} == *${{unsafe}}* ]]; then
        return
    fi
    # the word under the cursor may miss its closing quote
    eval "dequoted=${{word}}" 2>/dev/null && return
    eval "dequoted=${{word}}\"" 2>/dev/null && return
    eval "dequoted=${{word}}'" 2>/dev/null && return
    dequoted="${{word}}"
}}

__{ident}_get_completion_results()
{{
    local requestComp arg dequoted
    requestComp="{request}"
    for arg in "${{words[@]:1:cword}}"; do
        __{ident}_dequote "${{arg}}"
        requestComp+=" $(printf '%q' "${{dequoted}}")"
    done

    __{ident}_debug "About to call: eval ${{requestComp}}"
    out=$(eval "${{requestComp}}" 2>/dev/null)

    # the last line is the directive
    directive=${{out##*$'\n'}}
    if [[ ${{directive}} == "${{out}}" ]]; then
        out=""
    else
        out=${{out%$'\n'*}}
    fi
    directive=${{directive#:}}
    if ! [[ ${{directive}} =~ ^[0-9]+$ ]]; then
        __{ident}_debug "No directive received, the program probably failed"
        directive=0
        out=""
    fi
    __{ident}_debug "The completion directive is: ${{directive}}"
    __{ident}_debug "The completions are: ${{out}}"
}}

# bash only replaces the part of the word after the last COMP_WORDBREAKS character
__{ident}_trim_word_prefix()
{{
    local i prefix=""
    for (( i = ${{#cur}} - 1; i >= 0; i-- )); do
        if [[ ${{COMP_WORDBREAKS}} == *"${{cur:i:1}}"* ]]; then
            prefix="${{cur:0:i+1}}"
            break
        fi
    done
    if [[ -n ${{prefix}} ]]; then
        COMPREPLY=("${{COMPREPLY[@]#"${{prefix}}"}}")
    fi
}}

__{ident}_filter_file_ext()
{{
    local ext item pattern=""
    for ext in "$@"; do
        pattern+="${{pattern:+|}}${{ext#.}}"
    done
    compopt -o filenames 2>/dev/null
    if [[ -z ${{pattern}} ]]; then
        while IFS='' read -r item; do COMPREPLY+=("${{item}}"); done < <(compgen -f -- "${{cur}}")
        return
    fi
    local restore
    restore=$(shopt -p extglob)
    shopt -s extglob
    while IFS='' read -r item; do
        COMPREPLY+=("${{item}}")
    done < <(compgen -f -X "!*.@(${{pattern}})" -- "${{cur}}"; compgen -d -- "${{cur}}")
    eval "${{restore}}"
}}

__{ident}_filter_dirs()
{{
    local subdir="$1" item
    compopt -o filenames 2>/dev/null
    if [[ -n ${{subdir}} ]]; then
        __{ident}_debug "Listing directories in ${{subdir}}"
        pushd "${{subdir}}" >/dev/null 2>&1 || return
    fi
    while IFS='' read -r item; do COMPREPLY+=("${{item}}"); done < <(compgen -d -- "${{cur}}")
    if [[ -n ${{subdir}} ]]; then
        popd >/dev/null 2>&1 || return
    fi
}}

__{ident}_process_completion_results()
{{
{directives}

    if (( (directive & shellCompDirectiveError) != 0 )); then
        __{ident}_debug "Received error directive, showing nothing"
        compopt +o default 2>/dev/null
        return
    fi
    if (( (directive & shellCompDirectiveNoSpace) != 0 )); then
        compopt -o nospace 2>/dev/null
    fi
    if (( (directive & shellCompDirectiveKeepOrder) != 0 )); then
        # nosort needs bash 4.4
        if (( BASH_VERSINFO[0] > 4 || ( BASH_VERSINFO[0] == 4 && BASH_VERSINFO[1] >= 4 ) )); then
            compopt -o nosort 2>/dev/null
        fi
    fi
    if (( (directive & shellCompDirectiveNoFileComp) != 0 )); then
        compopt +o default 2>/dev/null
    fi

    local line
    local -a completions=()
    while IFS='' read -r line; do
        # bash cannot show descriptions
        [[ -n ${{line}} ]] && completions+=("${{line%%$'\t'*}}")
    done <<< "${{out}}"

    if (( (directive & shellCompDirectiveFilterFileExt) != 0 )); then
        __{ident}_filter_file_ext "${{completions[@]}}"
    elif (( (directive & shellCompDirectiveFilterDirs) != 0 )); then
        __{ident}_filter_dirs "${{completions[0]-}}"
    else
        COMPREPLY=("${{completions[@]}}")
        __{ident}_trim_word_prefix
    fi
}}

__{ident}_complete()
{{
    local cur words cword out directive
    __{ident}_init_completion

    __{ident}_debug
    __{ident}_debug "========= starting completion logic =========="
    __{ident}_debug "cur is ${{cur}}, words[*] is ${{words[*]}}, #words[@] is ${{#words[@]}}, cword is ${{cword}}"

    # the cursor may be in the middle of the line: ignore what follows it
    words=("${{words[@]:0:cword+1}}")

    __{ident}_get_completion_results
    __{ident}_process_completion_results
}}

if [[ $(type -t compopt) == builtin ]]; then
    complete -o default -F __{ident}_complete {shlex.quote(program_name)}
else
    complete -o default -o nospace -F __{ident}_complete {shlex.quote(program_name)}
fi
"""
