import pytest

from pulsebrew.config import BrewConfig
from pulsebrew.dispatcher import START_CUE, TRANSITION_CUES, CueDispatcher
from pulsebrew.state import TransitionKind

from .conftest import FakeAudio, FakeHaptics

LOUD = BrewConfig()
MUTED = BrewConfig(is_muted=True)


@pytest.mark.parametrize(
    "kind, audio_call, pattern",
    [
        (TransitionKind.BLOOM_COMPLETE, "play_arpeggio", (300, 100, 300, 100, 300)),
        (TransitionKind.POUR_COMPLETE, "play_low_ping", 70),
        (TransitionKind.WAIT_COMPLETE, "play_high_ping", (150, 50, 150)),
    ],
)
def test_transition_cue_table(kind, audio_call, pattern):
    audio, haptics = FakeAudio(), FakeHaptics()
    dispatcher = CueDispatcher(audio, haptics)

    dispatcher.dispatch(kind, LOUD)

    assert audio.calls == [audio_call]
    assert haptics.patterns == [pattern]


def test_start_cue_is_haptic_only():
    audio, haptics = FakeAudio(), FakeHaptics()
    cue = CueDispatcher(audio, haptics).dispatch_start(LOUD)

    assert cue is START_CUE
    assert audio.calls == []
    assert haptics.patterns == [50]


def test_every_transition_kind_has_a_cue():
    assert set(TRANSITION_CUES) == set(TransitionKind)


def test_muted_skips_audio_but_keeps_haptics_by_default():
    audio, haptics = FakeAudio(), FakeHaptics()
    dispatcher = CueDispatcher(audio, haptics)

    dispatcher.dispatch(TransitionKind.BLOOM_COMPLETE, MUTED)
    dispatcher.dispatch_start(MUTED)

    assert audio.calls == []
    assert haptics.patterns == [(300, 100, 300, 100, 300), 50]


def test_haptics_follow_mute_when_enabled():
    audio, haptics = FakeAudio(), FakeHaptics()
    dispatcher = CueDispatcher(audio, haptics, haptics_follow_mute=True)

    dispatcher.dispatch(TransitionKind.WAIT_COMPLETE, MUTED)
    dispatcher.dispatch_start(MUTED)
    assert haptics.patterns == []

    dispatcher.dispatch(TransitionKind.WAIT_COMPLETE, LOUD)
    assert haptics.patterns == [(150, 50, 150)]
    assert audio.calls == ["play_high_ping"]


def test_audio_failure_does_not_block_haptics():
    audio, haptics = FakeAudio(fail_play=True), FakeHaptics()
    dispatcher = CueDispatcher(audio, haptics)

    dispatcher.dispatch(TransitionKind.POUR_COMPLETE, LOUD)

    assert audio.calls == ["play_low_ping"]
    assert haptics.patterns == [70]


def test_haptic_failure_is_swallowed():
    audio, haptics = FakeAudio(), FakeHaptics(fail=True)
    dispatcher = CueDispatcher(audio, haptics)

    dispatcher.dispatch(TransitionKind.BLOOM_COMPLETE, LOUD)
    dispatcher.dispatch_start(LOUD)

    assert audio.calls == ["play_arpeggio"]
