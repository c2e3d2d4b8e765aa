from rich.console import Console
from rich.highlighter import ReprHighlighter
from rich.theme import Theme


class NatsHighlighter(ReprHighlighter):
    highlights = ReprHighlighter.highlights + [r"(?P<nats_url>(?:nats|tls|ws|wss)://[^\s\"']+)"]


def get_console(stderr: bool = False) -> Console:
    return Console(
        stderr=stderr,
        highlighter=NatsHighlighter(),
        theme=Theme({"repr.nats_url": "bold light_salmon3"}),
    )
