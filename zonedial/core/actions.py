"""Dial identities, action profiles and the named action catalog."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

from evdev import ecodes


class DialIdentity(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


class RotationDirection(enum.Enum):
    CLOCKWISE = "up"
    COUNTER_CLOCKWISE = "down"

    @property
    def sign(self) -> int:
        return 1 if self is RotationDirection.CLOCKWISE else -1

    @classmethod
    def from_value(cls, value: int) -> Optional["RotationDirection"]:
        if value > 0:
            return cls.CLOCKWISE
        if value < 0:
            return cls.COUNTER_CLOCKWISE
        return None


@dataclass(frozen=True)
class DialTurnEvent:
    identity: DialIdentity
    direction: RotationDirection


@dataclass(frozen=True)
class KeyPair:
    key_up: int
    key_down: int

    def key_for(self, direction: RotationDirection) -> int:
        return self.key_up if direction is RotationDirection.CLOCKWISE else self.key_down


@dataclass(frozen=True)
class RelativeAxis:
    axis: int
    multiplier: int = 1
    modifier: Optional[int] = None

    def amount_for(self, direction: RotationDirection) -> int:
        return direction.sign * int(self.multiplier)


@dataclass(frozen=True)
class Backlight:
    step_percent: int = 5


ActionProfile = Union[KeyPair, RelativeAxis, Backlight]


class UnknownActionError(ValueError):
    """Raised at startup when a dial is bound to a name not in the catalog."""

    def __init__(self, dial: DialIdentity, name: str):
        self.dial = dial
        self.name = name
        super().__init__(
            f"unknown action {name!r} for {dial.value} dial (choose from: {', '.join(sorted(ACTIONS))})"
        )


# Mirrors the dial functions exposed by the kernel driver.
ACTIONS: Mapping[str, ActionProfile] = MappingProxyType(
    {
        "volume": KeyPair(ecodes.KEY_VOLUMEUP, ecodes.KEY_VOLUMEDOWN),
        "brightness": Backlight(step_percent=5),
        "scroll": RelativeAxis(ecodes.REL_WHEEL, multiplier=1),
        "scroll_inverted": RelativeAxis(ecodes.REL_WHEEL, multiplier=-1),
        "scroll_horizontal": RelativeAxis(ecodes.REL_HWHEEL, multiplier=1),
        "arrows_vertical": KeyPair(ecodes.KEY_UP, ecodes.KEY_DOWN),
        "arrows_horizontal": KeyPair(ecodes.KEY_RIGHT, ecodes.KEY_LEFT),
        "media": KeyPair(ecodes.KEY_NEXTSONG, ecodes.KEY_PREVIOUSSONG),
        "page_scroll": KeyPair(ecodes.KEY_PAGEUP, ecodes.KEY_PAGEDOWN),
        "zoom": RelativeAxis(ecodes.REL_WHEEL, multiplier=1, modifier=ecodes.KEY_LEFTCTRL),
    }
)


def normalize_action_name(name: str) -> str:
    return str(name or "").strip().lower().replace("-", "_")


def resolve_action(dial: DialIdentity, name: str) -> ActionProfile:
    profile = ACTIONS.get(normalize_action_name(name))
    if profile is None:
        raise UnknownActionError(dial, str(name))
    return profile


@dataclass(frozen=True)
class DialBindings:
    """Immutable per-dial action assignment, built once at startup."""

    left: ActionProfile
    right: ActionProfile
    left_name: str = ""
    right_name: str = ""

    @classmethod
    def from_names(cls, left: str, right: str) -> "DialBindings":
        return cls(
            left=resolve_action(DialIdentity.LEFT, left),
            right=resolve_action(DialIdentity.RIGHT, right),
            left_name=normalize_action_name(left),
            right_name=normalize_action_name(right),
        )

    def profile_for(self, identity: DialIdentity) -> ActionProfile:
        return self.left if identity is DialIdentity.LEFT else self.right


def catalog_capabilities(profiles: Optional[Iterable[ActionProfile]] = None) -> dict[int, list[int]]:
    """Return the uinput capability map covering every profile in the catalog.

    The whole catalog is declared (not only the active bindings) so the same
    virtual device serves any configuration.
    """

    keys: set[int] = set()
    rels: set[int] = set()
    for profile in profiles if profiles is not None else ACTIONS.values():
        if isinstance(profile, KeyPair):
            keys.update((profile.key_up, profile.key_down))
        elif isinstance(profile, RelativeAxis):
            rels.add(profile.axis)
            if profile.modifier is not None:
                keys.add(profile.modifier)

    caps: dict[int, list[int]] = {}
    if keys:
        caps[ecodes.EV_KEY] = sorted(keys)
    if rels:
        caps[ecodes.EV_REL] = sorted(rels)
    return caps


def describe_profile(profile: ActionProfile) -> str:
    if isinstance(profile, KeyPair):
        return f"keys {_key_name(profile.key_up)} / {_key_name(profile.key_down)}"
    if isinstance(profile, RelativeAxis):
        axis = ecodes.REL.get(profile.axis, str(profile.axis))
        text = f"relative {axis} x{profile.multiplier}"
        if profile.modifier is not None:
            text += f" while holding {_key_name(profile.modifier)}"
        return text
    return f"display backlight {profile.step_percent}% steps"


def _key_name(code: int) -> str:
    name = ecodes.KEY.get(code, str(code))
    # Some codes alias several names (e.g. KEY_MUTE/KEY_MIN_INTERESTING).
    if isinstance(name, (list, tuple)):
        return str(name[0])
    return str(name)
