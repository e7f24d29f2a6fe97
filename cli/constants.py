"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["login", "info", "get", "put", "check", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#1B9AAA bold",
        "command": "#0088ff bold",
    }
)

TEAL = "\033[38;2;27;154;170m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{TEAL}
 ███████╗██╗   ██╗███╗   ██╗███████╗███████╗
 ██╔════╝╚██╗ ██╔╝████╗  ██║██╔════╝██╔════╝
 ███████╗ ╚████╔╝ ██╔██╗ ██║█████╗  ███████╗
 ╚════██║  ╚██╔╝  ██║╚██╗██║██╔══╝  ╚════██║
 ███████║   ██║   ██║ ╚████║██║     ███████║
 ╚══════╝   ╚═╝   ╚═╝  ╚═══╝╚═╝     ╚══════╝
{RESET}"""

WELCOME_TITLE = "SynFS CLI - Synapse virtual filesystem"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "synfs> "

HELP_TEXT = """Available commands:
  login <token>                       Save a Synapse personal access token
  info <uri>                          Show entity metadata
  get <uri> [output_path]             Download a file entity (defaults to its name in the current directory)
  put <local_path> <uri>              Upload a local file into a Synapse folder
  check <uri> [--write]               Check read access (or write access to a folder)
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

URIs: syn://syn123 (latest), syn://syn123.4 (version 4), syn://syn123/dir/file.txt (upload target).
Examples:
  login eyJ0eXAiOi...
  info syn://syn26986074
  get syn://syn26986074.2 downloads/data.csv
  put results/report.pdf syn://syn26986000/reports/report.pdf
  check syn://syn26986000 --write"""
