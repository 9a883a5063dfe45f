import sys

import pytest

from pondvis.__main__ import get_args


def test_threshold_shift_is_parsed(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["pondvis", "song.wav", "--threshold-shift", "-4", "--loop", "10,20,50@1"])
    args = get_args()
    assert args.threshold_shift == -4
    assert args.loop == [(1.0, 10.0, 20.0, 50.0)]
    assert not args.no_calibrate


def test_threshold_shift_defaults_to_zero(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["pondvis", "--duration", "3"])
    assert get_args().threshold_shift == 0.0


def test_duration_needed_without_audio(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["pondvis"])
    with pytest.raises(SystemExit):
        get_args()
