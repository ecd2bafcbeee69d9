"""Command line tokenizer for the interactive shell"""

import re
from typing import List, NamedTuple

# Arguments are always double-quoted; at most two are taken from a line
MAX_ARGS = 2

_QUOTED = re.compile(r'"([^"]*)"')


class Command(NamedTuple):
    name: str
    args: List[str]


class CommandParser:
    """Split shell input into a command name and its quoted arguments"""

    @staticmethod
    def tokenize(line: str) -> Command:
        """
        Parse one line of input

        Args:
            line: Raw input line (e.g. 'append "local.txt" "remote.txt"')

        Returns:
            Command with the name and up to two arguments

        Example:
            >>> CommandParser.tokenize('cd "my dir"')
            Command(name='cd', args=['my dir'])
            >>> CommandParser.tokenize('ls')
            Command(name='ls', args=[])
        """
        quote = line.find('"')
        if quote < 0:
            # Unquoted text after the command word is not an argument
            words = line.split()
            return Command(words[0] if words else "", [])

        name = line[:quote].strip()
        args = _QUOTED.findall(line, quote)[:MAX_ARGS]
        return Command(name, args)
