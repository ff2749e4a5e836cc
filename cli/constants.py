"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["store", "get", "list", "delete", "version", "chunks-size", "set-identity", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2E86DE bold",
    }
)

GREEN = "\033[32m"
RESET = "\033[0m"

WELCOME_TITLE = "AssetVault CLI - chunked asset uploader"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "assetvault> "

HELP_TEXT = """Available commands:
  store <path> [--content-type T] [--filename N]   Upload a file as a new asset
  get <asset-id>                                   Show asset details
  list                                             List all assets
  delete <asset-id>                                Delete an asset
  version                                          Show store version
  chunks-size                                      Show number of uncommitted chunks held by the store
  set-identity <identity>                          Save the identity used to authenticate
  help                                             Show this help
  exit                                             Exit REPL

Examples:
  store ./videos/bots.mp4
  store ./data.bin --content-type application/octet-stream --filename data.bin
  get 7f3c9a"""
