"""Button component styled with utility classes, and a merger for those classes."""

from __future__ import annotations

import enum
from collections.abc import Mapping

from markupsafe import Markup, escape

BUTTON_BASE_CLASSES = (
    "inline-flex items-center justify-center whitespace-nowrap rounded-md text-sm "
    "font-medium ring-offset-background transition-colors focus-visible:outline-none "
    "focus-visible:ring-2 focus-visible:ring-ring focus-visible:ring-offset-2 "
    "disabled:pointer-events-none disabled:opacity-50"
)


class ButtonVariant(enum.Enum):
    """Colour scheme of a button."""

    DEFAULT = "default"
    DESTRUCTIVE = "destructive"
    OUTLINE = "outline"
    SECONDARY = "secondary"
    GHOST = "ghost"
    LINK = "link"

    @property
    def classes(self) -> str:
        return _VARIANT_CLASSES[self]


class ButtonSize(enum.Enum):
    """Dimensions of a button."""

    DEFAULT = "default"
    SM = "sm"
    LG = "lg"
    ICON = "icon"

    @property
    def classes(self) -> str:
        return _SIZE_CLASSES[self]


_VARIANT_CLASSES = {
    ButtonVariant.DEFAULT: "bg-primary text-primary-foreground hover:bg-primary/90",
    ButtonVariant.DESTRUCTIVE: "bg-destructive text-destructive-foreground hover:bg-destructive/90",
    ButtonVariant.OUTLINE: "border border-input bg-background hover:bg-accent hover:text-accent-foreground",
    ButtonVariant.SECONDARY: "bg-secondary text-secondary-foreground hover:bg-secondary/80",
    ButtonVariant.GHOST: "hover:bg-accent hover:text-accent-foreground",
    ButtonVariant.LINK: "text-primary underline-offset-4 hover:underline",
}

_SIZE_CLASSES = {
    ButtonSize.DEFAULT: "h-10 px-4 py-2",
    ButtonSize.SM: "h-9 rounded-md px-3",
    ButtonSize.LG: "h-11 rounded-md px-8",
    ButtonSize.ICON: "h-10 w-10",
}

# --- class merging -------------------------------------------------------

_TEXT_SIZES = {"xs", "sm", "base", "lg", "xl"} | {f"{n}xl" for n in range(2, 10)}
_TEXT_ALIGN = {"left", "center", "right", "justify", "start", "end"}
_FONT_WEIGHTS = {
    "thin", "extralight", "light", "normal", "medium",
    "semibold", "bold", "extrabold", "black",
}
_RADII = {"none", "sm", "md", "lg", "xl", "2xl", "3xl", "full"}
_RADIUS_SIDES = ("s", "e", "t", "r", "b", "l", "ss", "se", "es", "ee", "tl", "tr", "br", "bl")
_BORDER_SIDES = ("x", "y", "s", "e", "t", "r", "b", "l")
_BORDER_STYLES = {"solid", "dashed", "dotted", "double", "hidden", "none"}

_EXACT: dict[str, str] = {}
_EXACT.update(dict.fromkeys(
    ("block", "inline-block", "inline", "flex", "inline-flex", "table", "inline-table",
     "grid", "inline-grid", "contents", "flow-root", "list-item", "hidden"),
    "display",
))
_EXACT.update(dict.fromkeys(("static", "fixed", "absolute", "relative", "sticky"), "position"))
_EXACT.update(dict.fromkeys(("visible", "invisible", "collapse"), "visibility"))
_EXACT.update(dict.fromkeys(("underline", "overline", "line-through", "no-underline"), "text-decoration"))
_EXACT.update(dict.fromkeys(("flex-row", "flex-row-reverse", "flex-col", "flex-col-reverse"), "flex-direction"))
_EXACT.update(dict.fromkeys(("flex-wrap", "flex-wrap-reverse", "flex-nowrap"), "flex-wrap"))
_EXACT.update(dict.fromkeys(("flex-1", "flex-auto", "flex-initial", "flex-none"), "flex"))
_EXACT.update(dict.fromkeys(("grow", "grow-0"), "grow"))
_EXACT.update(dict.fromkeys(("shrink", "shrink-0"), "shrink"))
_EXACT.update(dict.fromkeys(
    ("transition", "transition-none", "transition-all", "transition-colors",
     "transition-opacity", "transition-shadow", "transition-transform"),
    "transition",
))
_EXACT.update(dict.fromkeys(("sr-only", "not-sr-only"), "sr"))
_EXACT.update({"shadow": "shadow", "container": "container", "truncate": "text-overflow"})

_PREFIX_GROUPS: tuple[tuple[str, str], ...] = (
    ("whitespace-", "whitespace"),
    ("justify-items-", "justify-items"),
    ("justify-self-", "justify-self"),
    ("justify-", "justify-content"),
    ("items-", "align-items"),
    ("self-", "align-self"),
    ("content-", "align-content"),
    ("underline-offset-", "underline-offset"),
    ("decoration-", "decoration"),
    ("space-x-", "space-x"),
    ("space-y-", "space-y"),
    ("gap-x-", "gap-x"),
    ("gap-y-", "gap-y"),
    ("gap-", "gap"),
    ("px-", "px"), ("py-", "py"), ("pt-", "pt"), ("pr-", "pr"),
    ("pb-", "pb"), ("pl-", "pl"), ("ps-", "ps"), ("pe-", "pe"), ("p-", "p"),
    ("mx-", "mx"), ("my-", "my"), ("mt-", "mt"), ("mr-", "mr"),
    ("mb-", "mb"), ("ml-", "ml"), ("ms-", "ms"), ("me-", "me"), ("m-", "m"),
    ("min-w-", "min-w"), ("max-w-", "max-w"), ("min-h-", "min-h"), ("max-h-", "max-h"),
    ("w-", "w"), ("h-", "h"), ("size-", "size"),
    ("inset-x-", "inset-x"), ("inset-y-", "inset-y"), ("inset-", "inset"),
    ("top-", "top"), ("right-", "right"), ("bottom-", "bottom"), ("left-", "left"),
    ("z-", "z"),
    ("opacity-", "opacity"),
    ("pointer-events-", "pointer-events"),
    ("cursor-", "cursor"),
    ("duration-", "duration"),
    ("ease-", "ease"),
    ("delay-", "delay"),
    ("overflow-x-", "overflow-x"),
    ("overflow-y-", "overflow-y"),
    ("overflow-", "overflow"),
    ("shadow-", "shadow"),
    ("tracking-", "tracking"),
    ("leading-", "leading"),
    ("basis-", "basis"),
    ("grid-cols-", "grid-cols"),
    ("grid-rows-", "grid-rows"),
    ("col-span-", "col-span"),
    ("flex-", "flex"),
)

_CONFLICTS: dict[str, tuple[str, ...]] = {
    "p": ("px", "py", "pt", "pr", "pb", "pl", "ps", "pe"),
    "px": ("pr", "pl"),
    "py": ("pt", "pb"),
    "m": ("mx", "my", "mt", "mr", "mb", "ml", "ms", "me"),
    "mx": ("mr", "ml"),
    "my": ("mt", "mb"),
    "gap": ("gap-x", "gap-y"),
    "inset": ("inset-x", "inset-y", "top", "right", "bottom", "left"),
    "inset-x": ("right", "left"),
    "inset-y": ("top", "bottom"),
    "size": ("w", "h"),
    "overflow": ("overflow-x", "overflow-y"),
    "font-size": ("leading",),
    "rounded": tuple(f"rounded-{side}" for side in _RADIUS_SIDES),
    "rounded-t": ("rounded-tl", "rounded-tr"),
    "rounded-r": ("rounded-tr", "rounded-br"),
    "rounded-b": ("rounded-br", "rounded-bl"),
    "rounded-l": ("rounded-tl", "rounded-bl"),
    "border-w": tuple(f"border-w-{side}" for side in _BORDER_SIDES),
    "border-w-x": ("border-w-r", "border-w-l"),
    "border-w-y": ("border-w-t", "border-w-b"),
    "border-color": tuple(f"border-color-{side}" for side in _BORDER_SIDES),
    "border-color-x": ("border-color-r", "border-color-l"),
    "border-color-y": ("border-color-t", "border-color-b"),
}


def _is_length(value: str) -> bool:
    if value.isdigit():
        return True
    return value.startswith("[") and value.endswith("]") and value[1:2].isdigit()


def _rounded_group(utility: str) -> str:
    value = utility[len("rounded"):].lstrip("-")
    if not value or value in _RADII or value.startswith("["):
        return "rounded"
    side = value.partition("-")[0]
    return f"rounded-{side}" if side in _RADIUS_SIDES else "rounded"


def _ring_group(utility: str) -> str:
    if utility == "ring":
        return "ring-width"
    if utility == "ring-inset":
        return "ring-inset"
    value = utility[len("ring-"):]
    if value.startswith("offset-"):
        return "ring-offset-width" if _is_length(value[len("offset-"):]) else "ring-offset-color"
    return "ring-width" if _is_length(value) else "ring-color"


def _border_group(utility: str) -> str:
    if utility == "border":
        return "border-w"
    value = utility[len("border-"):]
    if value in _BORDER_SIDES:
        return f"border-w-{value}"
    side, _, rest = value.partition("-")
    if side in _BORDER_SIDES and rest:
        return f"border-w-{side}" if _is_length(rest) else f"border-color-{side}"
    if _is_length(value):
        return "border-w"
    if value in _BORDER_STYLES:
        return "border-style"
    if value in ("collapse", "separate"):
        return "border-collapse"
    return "border-color"


def _outline_group(utility: str) -> str:
    if utility in ("outline", "outline-none", "outline-dashed", "outline-dotted", "outline-double"):
        return "outline-style"
    value = utility[len("outline-"):]
    if value.startswith("offset-"):
        return "outline-offset"
    return "outline-width" if _is_length(value) else "outline-color"


def _class_group(utility: str) -> str | None:
    if utility.startswith("-"):
        utility = utility[1:]
    if utility in _EXACT:
        return _EXACT[utility]
    if utility.startswith("text-"):
        value = utility[len("text-"):]
        if value in _TEXT_SIZES:
            return "font-size"
        if value in _TEXT_ALIGN:
            return "text-align"
        return "text-color"
    if utility.startswith("font-"):
        return "font-weight" if utility[len("font-"):] in _FONT_WEIGHTS else "font-family"
    if utility == "rounded" or utility.startswith("rounded-"):
        return _rounded_group(utility)
    if utility == "ring" or utility.startswith("ring-"):
        return _ring_group(utility)
    if utility == "border" or utility.startswith("border-"):
        return _border_group(utility)
    if utility.startswith("outline"):
        return _outline_group(utility)
    if utility == "bg-none" or utility.startswith("bg-gradient-"):
        return "bg-image"
    if utility.startswith("bg-"):
        return "bg-color"
    for prefix, group in _PREFIX_GROUPS:
        if utility.startswith(prefix):
            return group
    return None


def _split_variants(token: str) -> tuple[list[str], str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in token:
        if char == "[":
            depth += 1
        elif char == "]":
            depth = max(depth - 1, 0)
        if char == ":" and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    return parts, "".join(current)


def merge_classes(*args: str | None) -> str:
    """Join class lists, letting later utilities override earlier conflicting ones."""
    tokens = " ".join(arg for arg in args if arg).split()
    taken: set[tuple[str, str]] = set()
    kept: list[str] = []
    for token in reversed(tokens):
        variants, base = _split_variants(token)
        important = base.startswith("!")
        if important:
            base = base[1:]
        group = _class_group(base)
        if group is None:
            kept.append(token)
            continue
        modifier = ":".join(sorted(variants)) + ("!" if important else "")
        if (modifier, group) in taken:
            continue
        taken.add((modifier, group))
        taken.update((modifier, conflict) for conflict in _CONFLICTS.get(group, ()))
        kept.append(token)
    return " ".join(reversed(kept))


def button_class(
    variant: ButtonVariant = ButtonVariant.DEFAULT,
    size: ButtonSize = ButtonSize.DEFAULT,
    extra: str | None = "",
) -> str:
    """The merged class list of a button."""
    return merge_classes(BUTTON_BASE_CLASSES, variant.classes, size.classes, extra)


def _render_attributes(attributes: Mapping[str, object]) -> Markup:
    rendered = []
    for name, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            rendered.append(Markup(" {}").format(name))
        else:
            rendered.append(Markup(' {}="{}"').format(name, value))
    return Markup("").join(rendered)


def render_button(
    children: str = "",
    variant: ButtonVariant = ButtonVariant.DEFAULT,
    size: ButtonSize = ButtonSize.DEFAULT,
    class_: str | None = "",
    attributes: Mapping[str, object] | None = None,
) -> Markup:
    """Render a ``<button>`` element; plain-text children are escaped."""
    return Markup('<button{} class="{}">{}</button>').format(
        _render_attributes(attributes or {}),
        button_class(variant, size, class_),
        escape(children),
    )