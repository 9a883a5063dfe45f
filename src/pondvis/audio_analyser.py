import logging
import sys

import librosa
import numpy as np

from pondvis.constants import (
    BANDS,
    CALIBRATION_DURATION,
    CALIBRATION_MARGIN,
    DEFAULT_AUDIO_THRESHOLD,
    ENVELOPE_RATES,
    ENVELOPE_SCALE,
    HOP_LENGTH,
    MAX_AUDIO_THRESHOLD,
    MAX_DECIBELS,
    MIN_AUDIO_THRESHOLD,
    MIN_DECIBELS,
    N_FFT,
)

logger = logging.getLogger(__name__)


def get_bin_index(frequency, sr, n_fft):
    return int(round(frequency / (sr / n_fft)))


def band_energy(spectrum, band, sr, n_fft):
    """Mean byte level of the bins covering `band` (a (low, high) Hz pair)."""
    min_bin = get_bin_index(band[0], sr, n_fft)
    max_bin = min(get_bin_index(band[1], sr, n_fft), len(spectrum) - 1)
    if max_bin < min_bin:
        return 0.0
    return float(np.mean(spectrum[min_bin : max_bin + 1]))


class AudioAnalyser:
    """
    Loads an audio file and slices it into per-frame band energies.
    """

    def __init__(self, filepath):
        logger.info(f"[+] Loading audio: {filepath}...")
        try:
            # Load audio with original sampling rate
            self.y, self.sr = librosa.load(filepath, sr=None)
            self.duration = librosa.get_duration(y=self.y, sr=self.sr)
        except Exception as e:
            sys.exit(f"[!] Error loading audio file: {e}")

        logger.info("[+] Analyzing audio frequencies...")
        self._calculate_byte_spectrum()
        self._calculate_band_energies()

    def _calculate_byte_spectrum(self):
        """
        Compute a linear spectrogram scaled to 0-255, the way a live
        analyser node reports byte frequency data.
        """
        magnitude = np.abs(librosa.stft(self.y, n_fft=N_FFT, hop_length=HOP_LENGTH))
        decibels = librosa.amplitude_to_db(magnitude * 2 / N_FFT, ref=1.0, top_db=None)
        scaled = 255 * (decibels - MIN_DECIBELS) / (MAX_DECIBELS - MIN_DECIBELS)
        self.byte_spectrum = np.clip(scaled, 0, 255)

    def _calculate_band_energies(self):
        n_frames = self.byte_spectrum.shape[1]
        self.band_energies = {
            name: np.array(
                [band_energy(self.byte_spectrum[:, i], band, self.sr, N_FFT) for i in range(n_frames)]
            )
            for name, band in BANDS.items()
        }

    def frame_at_time(self, t):
        frame_index = librosa.time_to_frames(t, sr=self.sr, hop_length=HOP_LENGTH, n_fft=N_FFT)

        # Boundary checks
        return int(min(max(frame_index, 0), self.byte_spectrum.shape[1] - 1))

    def get_data_at_time(self, t):
        """
        Returns the raw band energies (lows, mids, highs) at timestamp `t` in seconds.
        """
        frame_index = self.frame_at_time(t)
        return {name: float(values[frame_index]) for name, values in self.band_energies.items()}


class Envelope:
    """Follower with separate attack and release rates."""

    def __init__(self, attack, release):
        self.attack = attack
        self.release = release
        self.value = 0.0
        self.last_energy = 0.0

    def update(self, energy):
        rate = self.attack if energy > self.value else self.release
        self.value += (energy - self.value) * rate
        self.last_energy = energy
        return self.value

    def reset(self):
        self.value = 0.0
        self.last_energy = 0.0


class TrippyModulation:
    """Slow-moving audio-driven values the particle field reacts to."""

    def __init__(self):
        self.active = False
        self.reset()

    def reset(self):
        self.breath = 0.0
        self.breath_target = 0.0
        self.hue_rotation = 0.0
        self.sparkle = 0.0
        self.sparkle_target = 0.0
        self.swirl = 0.0
        self.swirl_target = 0.0
        self.connection_boost = 0.0
        self.connection_target = 0.0


class AudioModulator:
    """
    Turns band energies into the trippy modulation vector.
    Energies are gated by a noise threshold that can be calibrated or nudged.
    """

    def __init__(self, threshold=DEFAULT_AUDIO_THRESHOLD):
        self.threshold = threshold
        self.audio_active = False
        self.is_calibrating = False
        self.envelopes = {name: Envelope(*rates) for name, rates in ENVELOPE_RATES.items()}
        self.trippy = TrippyModulation()

    def _refresh_active(self):
        self.trippy.active = self.audio_active and not self.is_calibrating

    def start(self):
        self.audio_active = True
        self._refresh_active()

    def stop(self):
        """Switch audio off and forget everything it built up."""
        self.audio_active = False
        self.is_calibrating = False
        for envelope in self.envelopes.values():
            envelope.reset()
        self.trippy.reset()
        self._refresh_active()

    def can_adjust_threshold(self):
        return self.audio_active and not self.is_calibrating

    def adjust_threshold(self, delta):
        self.threshold = min(MAX_AUDIO_THRESHOLD, max(MIN_AUDIO_THRESHOLD, self.threshold + delta))
        return self.threshold

    def calibrate(self, analyser, notifier=None, now=None, interval=0.05):
        """Measure the noise floor over the start of the track and set the threshold above it."""
        self.is_calibrating = True
        self._refresh_active()
        if notifier is not None:
            notifier.show("calibrating... stay quiet", now)

        times = np.arange(0, min(CALIBRATION_DURATION, analyser.duration), interval)
        samples = []
        for t in times:
            energies = analyser.get_data_at_time(t)
            samples.append((energies["lows"] + energies["mids"] + energies["highs"]) / 3)

        if samples:
            self.threshold = float(np.mean(samples)) + CALIBRATION_MARGIN
        logger.info(f"[i] Audio threshold calibrated to {self.threshold:.1f}")

        self.is_calibrating = False
        self._refresh_active()
        if notifier is not None:
            notifier.show("ready!", now)
        return self.threshold

    def update(self, energies):
        """Feed one frame of raw band energies."""
        if not self.audio_active:
            return self.trippy

        lows = max(0.0, energies["lows"] - self.threshold)
        mids = max(0.0, energies["mids"] - self.threshold)
        highs = max(0.0, energies["highs"] - self.threshold)
        overall = (lows + mids + highs) / 3

        norm = {}
        for name, energy in (("lows", lows), ("mids", mids), ("highs", highs), ("overall", overall)):
            norm[name] = min(1.0, self.envelopes[name].update(energy) / ENVELOPE_SCALE)

        trippy = self.trippy
        trippy.breath_target = norm["lows"]
        trippy.breath += (trippy.breath_target - trippy.breath) * 0.03

        trippy.hue_rotation += norm["mids"] * 0.8

        trippy.sparkle_target = norm["highs"]
        trippy.sparkle += (trippy.sparkle_target - trippy.sparkle) * 0.04

        trippy.connection_target = norm["highs"] * 40
        trippy.connection_boost += (trippy.connection_target - trippy.connection_boost) * 0.03

        trippy.swirl_target = norm["overall"]
        trippy.swirl += (trippy.swirl_target - trippy.swirl) * 0.02
        return trippy
