"""hfchat theme system: palette, role themes, and the shared console."""

from dataclasses import dataclass
from rich.console import Console
from rich.style import Style


@dataclass(frozen=True)
class ColorPalette:
    """Fixed colors used by the document renderer and the transcript."""

    bg: str = "black"
    accent: str = "cyan"
    muted: str = "bright_black"
    link: str = "blue"
    inline_code: str = "yellow"
    code_bg: str = "black"
    code_fallback: str = "yellow"
    thinking: str = "magenta"
    error: str = "red"
    warning: str = "yellow"
    success: str = "green"


@dataclass(frozen=True)
class RoleTheme:
    """Visual identity for a single message role."""

    name: str
    color: str
    label: str


# Role visual identities
ROLE_THEMES: dict[str, RoleTheme] = {
    "user": RoleTheme(name="user", color="green", label="\U0001f464 You"),
    "assistant": RoleTheme(name="assistant", color="blue", label="\U0001f916 AI"),
    "system": RoleTheme(name="system", color="grey70", label="⚙️ System"),
}


@dataclass(frozen=True)
class HfchatTheme:
    """Complete theme binding palette + role themes."""

    palette: ColorPalette
    roles: dict[str, RoleTheme]

    def get_role(self, name: str) -> RoleTheme:
        """Look up a role theme by name, with a neutral fallback."""
        return self.roles.get(name, RoleTheme(
            name=name,
            color=self.palette.muted,
            label=name.title(),
        ))

    def base_style(self, role: str) -> Style:
        """Base style for a message body: role color on the background."""
        return Style(color=self.get_role(role).color, bgcolor=self.palette.bg)


DEFAULT_THEME = HfchatTheme(
    palette=ColorPalette(),
    roles=ROLE_THEMES,
)

console = Console()
