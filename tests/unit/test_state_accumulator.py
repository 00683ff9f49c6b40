from __future__ import annotations

from lightsync.core.state import (
    BLACK,
    AccumulatedState,
    Attribute,
    ColorRGB,
    PowerOffPolicy,
    StateDelta,
)
from lightsync.stream.accumulator import StateAccumulator


def _deltas(*pairs) -> list[StateDelta]:
    return [StateDelta(attribute, value) for attribute, value in pairs]


def _complete(acc: StateAccumulator) -> None:
    acc.apply(
        _deltas(
            (Attribute.POWER, True),
            (Attribute.HUE, 0),
            (Attribute.SATURATION, 100),
            (Attribute.BRIGHTNESS, 100),
        )
    )


def test_incomplete_color_emits_nothing() -> None:
    acc = StateAccumulator()

    assert acc.apply(_deltas((Attribute.BRIGHTNESS, 50))) is None
    assert acc.apply(_deltas((Attribute.HUE, 120))) is None
    assert acc.state.brightness == 50
    assert acc.state.hue == 120


def test_completing_batch_emits_converted_color() -> None:
    acc = StateAccumulator()
    acc.apply(_deltas((Attribute.BRIGHTNESS, 50)))

    event = acc.apply(_deltas((Attribute.HUE, 120), (Attribute.SATURATION, 100)))

    assert event is not None
    assert event.rgb == ColorRGB(0, 128, 0)
    assert event.hsb.hue == 120


def test_batch_emits_at_most_one_event() -> None:
    acc = StateAccumulator()
    event = acc.apply(
        _deltas(
            (Attribute.HUE, 240),
            (Attribute.SATURATION, 100),
            (Attribute.BRIGHTNESS, 100),
            (Attribute.HUE, 0),
        )
    )

    # Last write in the batch wins.
    assert event.rgb == ColorRGB(255, 0, 0)


def test_repeated_values_are_deduplicated() -> None:
    acc = StateAccumulator()
    _complete(acc)

    assert acc.apply(_deltas((Attribute.HUE, 0), (Attribute.BRIGHTNESS, 100))) is None
    assert acc.apply(_deltas((Attribute.HUE, 60))).rgb == ColorRGB(255, 255, 0)


def test_ignore_policy_does_not_react_to_power() -> None:
    acc = StateAccumulator(PowerOffPolicy.IGNORE)
    _complete(acc)

    assert acc.apply(_deltas((Attribute.POWER, False))) is None
    assert acc.state.power is False
    # Color changes still flow while off.
    assert acc.apply(_deltas((Attribute.HUE, 120))).rgb == ColorRGB(0, 255, 0)


def test_suppress_policy_withholds_colors_while_off() -> None:
    acc = StateAccumulator(PowerOffPolicy.SUPPRESS)
    _complete(acc)

    assert acc.apply(_deltas((Attribute.POWER, False))) is None
    assert acc.apply(_deltas((Attribute.HUE, 120))) is None

    event = acc.apply(_deltas((Attribute.POWER, True)))
    assert event.rgb == ColorRGB(0, 255, 0)


def test_blackout_policy_emits_black_on_power_off() -> None:
    acc = StateAccumulator(PowerOffPolicy.BLACKOUT)
    _complete(acc)

    event = acc.apply(_deltas((Attribute.POWER, False)))
    assert event.rgb == BLACK
    assert event.hsb is None

    event = acc.apply(_deltas((Attribute.POWER, True)))
    assert event.rgb == ColorRGB(255, 0, 0)


def test_blackout_policy_sends_black_once_while_off() -> None:
    acc = StateAccumulator(PowerOffPolicy.BLACKOUT)
    _complete(acc)

    assert acc.apply(_deltas((Attribute.POWER, False))).rgb == BLACK
    assert acc.apply(_deltas((Attribute.HUE, 120))) is None
    assert acc.apply(_deltas((Attribute.BRIGHTNESS, 40))) is None

    # Edits made while off show up when power returns.
    event = acc.apply(_deltas((Attribute.POWER, True)))
    assert event.hsb.hue == 120
    assert event.hsb.brightness == 40


def test_initial_state_is_copied_and_snapshot_is_independent() -> None:
    seed = AccumulatedState(power=True, hue=240, saturation=100, brightness=None)
    acc = StateAccumulator(initial=seed)

    event = acc.apply(_deltas((Attribute.BRIGHTNESS, 100)))
    assert event.rgb == ColorRGB(0, 0, 255)
    assert seed.brightness is None

    snapshot = acc.snapshot()
    acc.apply(_deltas((Attribute.HUE, 0)))
    assert snapshot.hue == 240
