"""Static shell completion scripts printed by ``llcm completion SHELL``."""

from typing import Dict, List

from llcm.errors import BadArgumentError

BASH_SCRIPT = r"""# bash completion for llcm
_llcm() {
    local cur prev commands flags
    COMPREPLY=()
    cur="${COMP_WORDS[COMP_CWORD]}"
    prev="${COMP_WORDS[COMP_CWORD-1]}"
    commands="list preview apply completion"
    flags="--profile --log-level --region --filter --desired --output --config --help"

    case "${prev}" in
        -l|--log-level)
            COMPREPLY=( $(compgen -W "debug info warn error" -- "${cur}") )
            return 0
            ;;
        -o|--output)
            COMPREPLY=( $(compgen -W "json prettyjson text compressedtext markdown backlog tsv chart" -- "${cur}") )
            return 0
            ;;
        -d|--desired)
            COMPREPLY=( $(compgen -W "delete 1day 3days 5days 1week 2weeks 1month 2months 3months 4months 5months 6months 1year 13months 18months 2years 3years 5years 6years 7years 8years 9years 10years infinite" -- "${cur}") )
            return 0
            ;;
        completion)
            COMPREPLY=( $(compgen -W "bash zsh pwsh" -- "${cur}") )
            return 0
            ;;
    esac

    if [[ ${COMP_CWORD} -eq 1 ]]; then
        COMPREPLY=( $(compgen -W "${commands} --version" -- "${cur}") )
    else
        COMPREPLY=( $(compgen -W "${flags}" -- "${cur}") )
    fi
}
complete -F _llcm llcm
"""

ZSH_SCRIPT = r"""#compdef llcm

_llcm() {
    local -a commands
    commands=(
        'list:List log group entries'
        'preview:Preview simulation results based on desired state'
        'apply:Apply desired state to log group entries'
        'completion:Print a shell completion script'
    )

    if (( CURRENT == 2 )); then
        _describe 'command' commands
        return
    fi

    _arguments \
        '(-p --profile)'{-p,--profile}'[set aws profile]:profile:' \
        '(-l --log-level)'{-l,--log-level}'[set log level]:level:(debug info warn error)' \
        '*'{-r,--region}'[set target regions]:region:' \
        '*'{-f,--filter}'[set expressions to filter log groups]:filter:' \
        '(-d --desired)'{-d,--desired}'[set the desired state]:state:(delete 1day 3days 5days 1week 2weeks 1month 2months 3months 4months 5months 6months 1year 13months 18months 2years 3years 5years 6years 7years 8years 9years 10years infinite)' \
        '(-o --output)'{-o,--output}'[set output type]:type:(json prettyjson text compressedtext markdown backlog tsv chart)' \
        '--config[settings file]:file:_files'
}

compdef _llcm llcm
"""

PWSH_SCRIPT = r"""Register-ArgumentCompleter -Native -CommandName llcm -ScriptBlock {
    param($wordToComplete, $commandAst, $cursorPosition)
    $words = $commandAst.CommandElements | ForEach-Object { $_.ToString() }
    if ($words.Count -le 2) {
        $candidates = @('list', 'preview', 'apply', 'completion', '--version')
    } else {
        $candidates = @('--profile', '--log-level', '--region', '--filter', '--desired', '--output', '--config', '--help')
    }
    $candidates | Where-Object { $_ -like "$wordToComplete*" } | ForEach-Object {
        [System.Management.Automation.CompletionResult]::new($_, $_, 'ParameterValue', $_)
    }
}
"""

COMPLETION_SCRIPTS: Dict[str, str] = {
    "bash": BASH_SCRIPT,
    "zsh": ZSH_SCRIPT,
    "pwsh": PWSH_SCRIPT,
}


def supported_shells() -> List[str]:
    return list(COMPLETION_SCRIPTS.keys())


def get_completion_script(shell: str) -> str:
    """
    Return the completion script of a shell.

    Raises:
        BadArgumentError: If the shell is not supported
    """
    try:
        return COMPLETION_SCRIPTS[shell]
    except KeyError:
        raise BadArgumentError(f"unsupported shell: {shell!r}") from None
