import argparse
import logging
import math
import sys
from array import array

import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_0, K_1, K_2, K_3,
    K_4, K_5, K_6, K_7,
    K_8, K_9, K_a, K_b,
    K_c, K_d, K_e, K_f,
)

from chip8 import SCREEN_HEIGHT, SCREEN_WIDTH, Chip8, Chip8Error, KeyDown, KeyUp


logger = logging.getLogger(__name__)


# ******************** STATIC SECTION
KEY_MAPPINGS = {
    K_0: 0x0,
    K_1: 0x1,
    K_2: 0x2,
    K_3: 0x3,
    K_4: 0x4,
    K_5: 0x5,
    K_6: 0x6,
    K_7: 0x7,
    K_8: 0x8,
    K_9: 0x9,
    K_a: 0xA,
    K_b: 0xB,
    K_c: 0xC,
    K_d: 0xD,
    K_e: 0xE,
    K_f: 0xF,
}

DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False
CLOCK_HZ = 300          # instructions per second, timers tick once per instruction
SCREEN_FLAGS = 0        # if more than one use | to combine them
SCALE = 15
BLUE = pygame.Color(80,69,155,255)
LIGHT_BLUE = pygame.Color(136,126,203,255)
BEEP_FREQUENCY = 440
SAMPLE_RATE = 44100
BEEP_VOLUME = 0.25


# ******************** CONFIG SECTION
def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="CHIP-8 interpreter")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("--hz", type=int, default=CLOCK_HZ, help=f"instructions per second (default {CLOCK_HZ})")
    parser.add_argument("--scale", type=int, default=SCALE, help=f"size in pixels of a CHIP-8 pixel (default {SCALE})")
    parser.add_argument("--debug", action="store_true", default=DEBUG,
                        help="log every executed instruction (also enabled by DEBUG=1)")
    args = parser.parse_args(argv)
    if args.hz <= 0:
        parser.error("--hz must be a positive number")
    if args.scale <= 0:
        parser.error("--scale must be a positive number")
    return args


# ******************** ROM SECTION
def load_rom(path):
    """read a raw CHIP-8 image, errors opening or reading the file are left to the caller"""
    with open(path, mode='rb') as f:
        rom = f.read()
    logger.info(f"The ROM at path {path} has been read successfully ({len(rom)} bytes)")
    return rom


# ******************** I/O SECTION
class Screen:
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, flgs=SCREEN_FLAGS, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
            flgs,
        )
        self.surface.fill(self.background)

    def write_pixel(self, x, y, color):
        """
        set a pixel on the screen, being it a foreground pixel or a background one
        the change won't be immediatly visible because it'll require a call to the static method refresh
        """
        pygame.draw.rect(
            self.surface,
            self.background if color==0 else self.foreground,
            (x * self.scale, y * self.scale, self.scale, self.scale)
        )

    def render(self, framebuffer):
        """paint a whole row-major framebuffer and show it"""
        self.surface.fill(self.background)
        for cell, color in enumerate(framebuffer):
            if color:
                y, x = divmod(cell, self.w)
                self.write_pixel(x, y, color)
        self.refresh()

    @staticmethod
    def refresh():
        pygame.display.flip()


def translate_event(event):
    """turn a pygame key event into a KeyDown/KeyUp for the keypad, None for everything else"""
    if event.type not in (pygame.KEYDOWN, pygame.KEYUP):
        return None
    key = KEY_MAPPINGS.get(event.key)
    if key is None:
        return None
    return KeyDown(key) if event.type == pygame.KEYDOWN else KeyUp(key)


class Beeper:
    """a looping square wave played while the sound timer is active"""
    def __init__(self, frequency=BEEP_FREQUENCY, sample_rate=SAMPLE_RATE, volume=BEEP_VOLUME):
        self.playing = False
        self.sound = None
        try:
            pygame.mixer.init(frequency=sample_rate, size=-16, channels=1)
        except pygame.error as err:
            logger.warning(f"no audio device available, the emulator will stay silent: {err}")
            return
        # the mixer may not honour the requested settings
        sample_rate, _, channels = pygame.mixer.get_init()
        self.sound = pygame.mixer.Sound(buffer=self.square_wave(frequency, sample_rate, volume, channels))

    @staticmethod
    def square_wave(frequency, sample_rate, volume, channels=1):
        """one period of a signed 16 bit square wave, as raw bytes"""
        period = max(2, round(sample_rate / frequency))
        amplitude = int(volume * 32767)
        samples = array('h')
        for i in range(period):
            value = amplitude if math.sin(2 * math.pi * i / period) >= 0 else -amplitude
            samples.extend([value] * channels)
        return samples.tobytes()

    def update(self, should_beep):
        """start or stop the tone following the sound timer state"""
        if self.sound is None or should_beep == self.playing:
            return
        if should_beep:
            self.sound.play(loops=-1)
        else:
            self.sound.stop()
        self.playing = should_beep


# ******************** ENTRY POINT SECTION
def run(chip, screen, beeper, hz=CLOCK_HZ):
    clock = pygame.time.Clock()
    # emulation loop
    running = True
    while running:
        # instructions per second
        clock.tick(hz)
        # process user input
        # loop through the event queue
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False
            else:
                key_event = translate_event(event)
                if key_event is not None:
                    chip.handle_input(key_event)
        chip.step()         # emulate one machine cycle (fetch opcode, decode opcode, execute opcode, update timers)
        # refresh screen if needed, the flag is ours to clear
        if chip.draw:
            screen.render(chip.framebuffer)
            chip.draw = False
        beeper.update(chip.should_beep)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    try:
        rom = load_rom(args.file)
    except OSError as err:
        sys.exit(f"Unable to read the ROM at path {args.file}: {err}")
    # CPU
    chip = Chip8()
    try:
        chip.load(rom)
    except Chip8Error as err:
        sys.exit(f"Unable to load the ROM at path {args.file}: {err}")
    # pygame initialization
    pygame.init()
    pygame.display.set_caption(os.path.basename(args.file))
    # IO
    screen = Screen(s=args.scale)
    beeper = Beeper()
    try:
        run(chip, screen, beeper, args.hz)
    except Chip8Error as err:
        logger.error(f"the emulator crashed: {err}")
        sys.exit(f"********** THE EMULATOR CRASHED WITH THE FOLLOWING STATE\n{err}\n{chip}")
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
