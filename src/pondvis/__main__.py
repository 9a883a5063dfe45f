import argparse
import logging
import os
import sys

import cv2
from moviepy import AudioFileClip, VideoClip

from pondvis.audio_analyser import AudioAnalyser, AudioModulator
from pondvis.clock import ManualClock
from pondvis.constants import DEFAULT_FPS, DEFAULT_RESOLUTION
from pondvis.gesture import GestureRecorder
from pondvis.notifications import Notifier
from pondvis.script import ScriptedInput, parse_loop, parse_ripple
from pondvis.visualiser_renderer import VisualiserRenderer
from pondvis.world import World

logger = logging.getLogger(__name__)


def get_args():
    parser = argparse.ArgumentParser(
        description="Render a reactive particle pond, with loop-drawn black holes, to a video file."
    )
    parser.add_argument("input", nargs="?", help="Optional audio file (WAV/MP3) driving the field")
    parser.add_argument("--output", "-o", default="pond.mp4", help="Path to output video file")
    parser.add_argument("--width", type=int, default=DEFAULT_RESOLUTION[0], help="Video width")
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Video height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument("--duration", type=float, help="Limit duration in seconds (required without audio)")
    parser.add_argument("--seed", type=int, help="Random seed for a repeatable render")
    parser.add_argument(
        "--loop",
        type=parse_loop,
        action="append",
        default=[],
        metavar="X,Y,R@T",
        help="Draw a loop of radius R around (X, Y) at T seconds",
    )
    parser.add_argument(
        "--ripple",
        type=parse_ripple,
        action="append",
        default=[],
        metavar="X,Y@T",
        help="Click at (X, Y) at T seconds",
    )
    parser.add_argument("--no-calibrate", action="store_true", help="Skip measuring the noise floor")
    parser.add_argument(
        "--threshold-shift",
        type=float,
        default=0.0,
        metavar="DELTA",
        help="Nudge the (calibrated) noise threshold up or down, clamped to 5-100",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    if args.width <= 0 or args.height <= 0:
        parser.error("width and height must be positive")
    if args.fps <= 0:
        parser.error("fps must be positive")
    if args.input is None and not args.duration:
        parser.error("--duration is required when no audio file is given")
    return args


def main():
    args = get_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    # 1. Validation
    if args.input and not os.path.exists(args.input):
        sys.exit(f"[!] Input file not found: {args.input}")

    # 2. Analyze Audio
    analyser = modulator = None
    duration = args.duration
    if args.input:
        analyser = AudioAnalyser(args.input)
        modulator = AudioModulator()
        if duration is None:
            duration = analyser.duration
        elif duration < analyser.duration:
            logger.info(f"[i] Truncating duration to {duration} seconds.")
        else:
            logger.info("[i] Audio switches off when the track ends.")

    # 3. Build the world
    clock = ManualClock()
    world = World(
        args.width,
        args.height,
        clock=clock,
        seed=args.seed,
        notifier=Notifier(),
        modulation=modulator.trippy if modulator else None,
    )
    count = world.sync_particle_count()

    if modulator is not None:
        if not args.no_calibrate:
            modulator.calibrate(analyser, world.notifier, clock.now())
        modulator.start()
        if args.threshold_shift and modulator.can_adjust_threshold():
            threshold = modulator.adjust_threshold(args.threshold_shift)
            logger.info(f"[i] Audio threshold set to {threshold:.1f}")

    recorder = GestureRecorder(world)
    script = ScriptedInput(recorder, loops=args.loop, ripples=args.ripple)

    logger.info(f"[+] Preparing render: {args.width}x{args.height} @ {args.fps}fps, {count} particles")
    logger.info(f"[+] Duration: {duration:.2f} seconds")

    renderer = VisualiserRenderer(
        world,
        args.width,
        args.height,
        args.fps,
        clock,
        analyser=analyser,
        modulator=modulator,
        recorder=recorder,
        script=script,
    )

    def make_frame_wrapper(t):
        frame = renderer.make_frame(t)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    video_clip = VideoClip(make_frame_wrapper, duration=duration)

    if args.input:
        audio_clip = AudioFileClip(args.input).subclipped(0, min(duration, analyser.duration))
        video_clip = video_clip.with_audio(audio_clip)

    # 4. Export
    logger.info("[+] Rendering video... (This may take a while)")
    video_clip.write_videofile(
        args.output,
        fps=args.fps,
        codec="libx264",
        audio_codec="aac",
        threads=4,
        preset="medium",
        logger="bar",
    )

    logger.info(f"[+] Done! Saved to {args.output}")


if __name__ == "__main__":
    main()
