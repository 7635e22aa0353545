# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# https://chip-8.github.io/links/
#
# TECHNICAL REFERENCE
# http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
#
# MASTERING CHIP-8
# https://github.com/mattmikolay/chip-8/wiki/Mastering-CHIP%E2%80%908
#
# TEST SUITE
# https://github.com/Timendus/chip8-test-suite


import logging
import random
from collections import namedtuple
from functools import wraps


logger = logging.getLogger(__name__)


# ******************** STATIC SECTION
C8_FONTS = [0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
            0x20, 0x60, 0x20, 0x20, 0x70,  # 1
            0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
            0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
            0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
            0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
            0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
            0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
            0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
            0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
            0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
            0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
            0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
            0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
            0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
            0xF0, 0x80, 0xF0, 0x80, 0x80]  # F

FONT_SPRITE_SIZE = 5
MEMORY_SIZE = 4096
ROM_START_ADDRESS = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - ROM_START_ADDRESS
ADDRESS_SPACE_END = 0xFFF
STACK_SIZE = 16
KEYPAD_SIZE = 16
SCREEN_HEIGHT = 32
SCREEN_WIDTH = 64
SPRITE_WIDTH = 8

# decoding masks and the patterns each of them selects
# the top nibble already tells the groups apart, the lower nibbles are
# only needed for the 0, 5, 8, 9, E and F groups
DECODE_MASKS = (
    (0xFFFF, (0x00E0, 0x00EE)),
    (0xF0FF, (0xE09E, 0xE0A1,
              0xF007, 0xF00A, 0xF015, 0xF018, 0xF01E, 0xF029, 0xF033, 0xF055, 0xF065)),
    (0xF00F, (0x5000,
              0x8000, 0x8001, 0x8002, 0x8003, 0x8004, 0x8005, 0x8006, 0x8007, 0x800E,
              0x9000)),
    (0xF000, (0x1000, 0x2000, 0x3000, 0x4000, 0x6000, 0x7000,
              0xA000, 0xB000, 0xC000, 0xD000)),
)


# ******************** ERRORS SECTION
class Chip8Error(Exception):
    """base class for every error raised by the interpreter"""


class ProgramTooLargeError(Chip8Error, ValueError):
    """the program image doesn't fit in memory past ROM_START_ADDRESS"""


class InvalidKeyError(Chip8Error, ValueError):
    """a key event carried an index outside of the 16 keys of the keypad"""


class MachineError(Chip8Error):
    """
    the running program broke an invariant of the machine
    the run can't continue: the step that raised it stores it as the machine fault
    """
    def __init__(self, reason, opcode=None, pc=None):
        super().__init__(reason)
        self.reason = reason
        self.opcode = opcode
        self.pc = pc

    def __str__(self):
        opcode = "----" if self.opcode is None else f"{self.opcode:04x}"
        pc = "----" if self.pc is None else f"{self.pc:04x}"
        return f"{self.reason} (opcode: 0x{opcode}, pc: 0x{pc})"


class UnknownOpcodeError(MachineError):
    pass


class StackOverflowError(MachineError):
    pass


class StackUnderflowError(MachineError):
    pass


class MemoryAccessError(MachineError):
    pass


# ******************** INPUT EVENTS SECTION
KeyDown = namedtuple("KeyDown", ["key"])
KeyUp = namedtuple("KeyUp", ["key"])


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to log the ASM of the instruction being called"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(*args, **kwargs):
            mem_addr = args[0].pc       # args[0] equals self of the decorated method
            vals = fn(*args, **kwargs)  # use the locals() values of each decorated function in the message
            if logger.isEnabledFor(logging.DEBUG):
                vals['mem_addr'] = mem_addr
                logger.debug(msg.format(**vals))
        return wrapper_fn
    return decorator


def decode(opcode):
    """
    decode an opcode using masks and return the pattern it belongs to, i.e. the opcode
    with every operand nibble cleared (0x6A2F -> 0x6000, 0xF155 -> 0xF055)
    raise UnknownOpcodeError when the opcode matches none of the patterns
    """
    for mask, patterns in DECODE_MASKS:
        if (opcode & mask) in patterns:
            return opcode & mask
    raise UnknownOpcodeError("unknown opcode", opcode)


# ******************** MEMORY SECTION
# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self):
        self.addr_list = []
        self.size = 0   # stack pointer

    def __repr__(self):
        return f"Stack({', '.join(f'0x{a:04x}' for a in self.addr_list)})"

    def append(self, address):
        if self.size >= STACK_SIZE:
            raise StackOverflowError(f"the stack can contain at most {STACK_SIZE} addresses")
        self.addr_list.append(address)
        self.size += 1

    def pop(self):
        if self.size == 0:
            raise StackUnderflowError("return with an empty stack")
        self.size -= 1
        return self.addr_list.pop()


# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self):
        self.inner = bytearray(MEMORY_SIZE)
        self.inner[0x00:0x00+len(C8_FONTS)] = bytes(C8_FONTS)

    def _check_range(self, start, stop):
        if start < 0 or stop > MEMORY_SIZE or start > stop:
            raise MemoryAccessError(f"memory access out of range [0x{start:04x}, 0x{stop:04x})")

    def _slice_bounds(self, key):
        if key.step is not None or key.start is None or key.stop is None:
            raise TypeError("memory slices need an explicit start and stop and no step")
        self._check_range(key.start, key.stop)
        return key.start, key.stop

    def __getitem__(self, key):
        if isinstance(key, slice):
            start, stop = self._slice_bounds(key)
            return bytes(self.inner[start:stop])
        self._check_range(key, key + 1)
        return self.inner[key]

    def __setitem__(self, key, value):
        if isinstance(key, slice):
            start, stop = self._slice_bounds(key)
            value = bytes(value)
            if len(value) != stop - start:
                raise ValueError("memory slice assignment can't change the memory size")
            self.inner[start:stop] = value
        else:
            self._check_range(key, key + 1)
            self.inner[key] = value

    def load(self, data):
        """copy a program image at ROM_START_ADDRESS, leave memory untouched if it doesn't fit"""
        rom = bytes(data)
        if len(rom) > MAX_ROM_SIZE:
            raise ProgramTooLargeError(
                f"the program is {len(rom)} bytes long, at most {MAX_ROM_SIZE} bytes fit in memory"
            )
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS+len(rom)] = rom
        logger.debug(f"loaded {len(rom)} bytes at 0x{ROM_START_ADDRESS:04x}")


# ******************** INPUT SECTION
class Keypad:
    """state of the 16 keys of the hex keypad, True while a key is held down"""
    def __init__(self):
        self.keys = [False] * KEYPAD_SIZE

    def __repr__(self):
        pressed = [f"{k:x}" for k, down in enumerate(self.keys) if down]
        return f"Keypad(pressed=[{', '.join(pressed)}])"

    def __len__(self):
        return len(self.keys)

    def __getitem__(self, key):
        return self.keys[key]

    def __setitem__(self, key, value):
        self.keys[key] = bool(value)


# ******************** CPU SECTION
class Chip8:
    def __init__(self, rng=None):
        self.mem = Memory()
        self.stack = Stack()
        self.keypad = Keypad()
        self.v_regs = bytearray(16)
        self.vram = bytearray(SCREEN_WIDTH * SCREEN_HEIGHT)
        self.pc = ROM_START_ADDRESS
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.draw = False       # raised whenever vram changes, cleared by whoever renders it
        self.stopped = False    # waiting for a key press (FX0A)
        self.key_register = None
        self.fault = None
        self.rng = rng if rng is not None else random.Random()
        self.instructions = {
            0x00E0: self._clear_screen,
            0x00EE: self._return,
            0x1000: self._jump,
            0x2000: self._call_addr,
            0x3000: self._skip_if_eq,
            0x4000: self._skip_if_not_eq,
            0x5000: self._skip_if_eq_regs,
            0x6000: self._set_vk,
            0x7000: self._add_to_vk,
            0x8000: self._set_vx_to_vy,
            0x8001: self._set_vx_or_vy,
            0x8002: self._set_vx_and_vy,
            0x8003: self._set_vx_xor_vy,
            0x8004: self._add_vx_vy,
            0x8005: self._sub_vx_vy,
            0x8006: self._shr,
            0x8007: self._subn_vx_vy,
            0x800E: self._shl,
            0x9000: self._skip_if_not_eq_regs,
            0xA000: self._set_idx,
            0xB000: self._jump_plus,
            0xC000: self._random_byte_and,
            0xD000: self._to_screen,
            0xE09E: self._skip_if_pressed,
            0xE0A1: self._skip_if_not_pressed,
            0xF007: self._set_vx_dt,
            0xF00A: self._wait_keypress,
            0xF015: self._set_dt_vx,
            0xF018: self._set_st,
            0xF01E: self._add_to_idx,
            0xF029: self._select_char,
            0xF033: self._bcd_repr,
            0xF055: self._store_vregs,
            0xF065: self._load_vregs,
        }

    def __str__(self):
        registers = " ".join(f"V{i:X}:{v:02x}" for i, v in enumerate(self.v_regs))
        pointers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | SP:{self.stack.size}"
        stack = f"STACK:{self.stack!r}"
        timers = f"DT:{self.dt} | ST:{self.st}"
        flags = f"DRAW:{self.draw} | STOPPED:{self.stopped} | {self.keypad!r}"
        return f"{pointers}\n{registers}\n{stack}\n{timers}\n{flags}"

    # ********** PUBLIC INTERFACE
    @property
    def framebuffer(self):
        """read-only, row-major view over the 64x32 screen cells, 1 means the pixel is ON"""
        return memoryview(self.vram).toreadonly()

    @property
    def should_beep(self):
        return self.st != 0

    def load(self, data):
        """copy a program image in memory starting at ROM_START_ADDRESS"""
        self.mem.load(data)

    def handle_input(self, event):
        """update the keypad with a KeyDown/KeyUp event, a KeyDown resumes a pending FX0A"""
        if not isinstance(event, (KeyDown, KeyUp)):
            raise TypeError(f"expected a KeyDown or KeyUp event, got {event!r}")
        key = event.key
        if not isinstance(key, int) or isinstance(key, bool) or not 0 <= key < len(self.keypad):
            raise InvalidKeyError(f"key index {key!r} is outside of the keypad range 0x0-0xf")
        if isinstance(event, KeyUp):
            self.keypad[key] = False
            return
        self.keypad[key] = True
        if self.stopped:
            self.v_regs[self.key_register] = key
            self.key_register = None
            self.stopped = False

    def fetch(self):
        """each instruction is two bytes long, stored big-endian"""
        return self.mem[self.pc] << 8 | self.mem[self.pc + 1]

    def step(self):
        """emulate one machine cycle (fetch opcode, decode opcode, execute opcode, update timers)"""
        if self.fault is not None:
            raise self.fault
        if self.stopped:
            return
        pc, opcode = self.pc, None
        try:
            opcode = self.fetch()
            instruction = self.instructions[decode(opcode)]
            instruction(opcode)
        except MachineError as err:
            err.opcode, err.pc = opcode, pc
            self.fault = err
            raise
        # delay/sound timers (dt/st)
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            if self.st == 1:
                logger.debug("sound timer expired, beep ends")
            self.st -= 1

    # ********** INSTRUCTIONS
    def _goto_next_instruction(self):
        self.pc += 0x2

    def _skip_next_instruction(self):
        self.pc += 0x4

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKP V{x:X}")
    def _skip_if_pressed(self, opcode):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        x = (opcode & 0x0F00) >> 8
        key = self._keypad_index(self.v_regs[x])
        if self.keypad[key]:
            self._skip_next_instruction()
        else:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKNP V{x:X}")
    def _skip_if_not_pressed(self, opcode):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        x = (opcode & 0x0F00) >> 8
        key = self._keypad_index(self.v_regs[x])
        if not self.keypad[key]:
            self._skip_next_instruction()
        else:
            self._goto_next_instruction()
        return locals()

    def _keypad_index(self, key):
        if key >= len(self.keypad):
            raise MachineError(f"key index 0x{key:02x} is outside of the keypad range 0x0-0xf")
        return key

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, K")
    def _wait_keypress(self, opcode):
        """wait for a key press and store its value in Vx"""
        x = (opcode & 0x0F00) >> 8
        self.stopped = True         # handle_input stores the key and clears it
        self.key_register = x
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, DT")
    def _set_vx_dt(self, opcode):
        """set Vx = DT (delay timer) value"""
        x = (opcode & 0x0F00) >> 8
        self.v_regs[x] = self.dt
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD DT, V{x:X}")
    def _set_dt_vx(self, opcode):
        """set DT (delay timer) = Vx"""
        x = (opcode & 0x0F00) >> 8
        self.dt = self.v_regs[x]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CLS")
    def _clear_screen(self, opcode):
        self.vram[:] = bytes(len(self.vram))
        self.draw = True
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RET")
    def _return(self, opcode):
        """return from a subroutine, the stack holds the address of the call instruction"""
        self.pc = self.stack.pop() + 2
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP 0x{address:03x}")
    def _jump(self, opcode):
        address = opcode & 0x0FFF
        self.pc = address
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CALL 0x{address:03x}")
    def _call_addr(self, opcode):
        address = opcode & 0x0FFF
        self.stack.append(self.pc)
        self.pc = address
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x:X}, {comparison_value}")
    def _skip_if_eq(self, opcode):
        x = (opcode & 0x0F00) >> 8
        comparison_value = opcode & 0x00FF
        if self.v_regs[x] == comparison_value:
            self._skip_next_instruction()
        else:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x:X}, {comparison_value}")
    def _skip_if_not_eq(self, opcode):
        x = (opcode & 0x0F00) >> 8
        comparison_value = opcode & 0x00FF
        if self.v_regs[x] != comparison_value:
            self._skip_next_instruction()
        else:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x:X}, V{y:X}")
    def _skip_if_eq_regs(self, opcode):
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        if self.v_regs[x] == self.v_regs[y]:
            self._skip_next_instruction()
        else:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x:X}, V{y:X}")
    def _skip_if_not_eq_regs(self, opcode):
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        if self.v_regs[x] != self.v_regs[y]:
            self._skip_next_instruction()
        else:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, {value}")
    def _set_vk(self, opcode):
        """set the value of one of the 16 variable registers, Vx"""
        x, value = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        self.v_regs[x] = value
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x:X}, {value}")
    def _add_to_vk(self, opcode):
        """add to the value already present in one of the variable registers, VF is left alone"""
        x, value = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        self.v_regs[x] = (self.v_regs[x] + value) & 0xFF    # keep only the lowest 8 bits from the result and store them in Vx
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, V{y:X}")
    def _set_vx_to_vy(self, opcode):
        """set the value of Vx equal to that of Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] = self.v_regs[y]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: OR V{x:X}, V{y:X}")
    def _set_vx_or_vy(self, opcode):
        """set the value of Vx to Vx OR Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] |= self.v_regs[y]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: AND V{x:X}, V{y:X}")
    def _set_vx_and_vy(self, opcode):
        """set the value of Vx to Vx AND Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] &= self.v_regs[y]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: XOR V{x:X}, V{y:X}")
    def _set_vx_xor_vy(self, opcode):
        """set the value of Vx to Vx XOR Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] ^= self.v_regs[y]
        self._goto_next_instruction()
        return locals()

    # the flag is always written last: with x == 0xF the flag wins over the result

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x:X}, V{y:X}")
    def _add_vx_vy(self, opcode):
        """set the value of Vx to Vx + Vy, VF = carry"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        total = self.v_regs[x] + self.v_regs[y]
        self.v_regs[x] = total & 0xFF     # keep only the lowest 8 bits from the result and store them in Vx
        self.v_regs[0xF] = 1 if total > 0xFF else 0
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUB V{x:X}, V{y:X}")
    def _sub_vx_vy(self, opcode):
        """set the value of Vx to Vx - Vy, VF = NOT borrow"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        no_borrow = 1 if self.v_regs[x] >= self.v_regs[y] else 0
        self.v_regs[x] = (self.v_regs[x] - self.v_regs[y]) & 0xFF
        self.v_regs[0xF] = no_borrow
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHR V{x:X}")
    def _shr(self, opcode):
        """set Vx equal to Vx SHR 1, VF = the bit shifted out"""
        x = (opcode & 0x0F00) >> 8
        LSB = self.v_regs[x] & 0x1
        self.v_regs[x] = self.v_regs[x] >> 1
        self.v_regs[0xF] = LSB
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUBN V{x:X}, V{y:X}")
    def _subn_vx_vy(self, opcode):
        """set the value of Vx to Vy - Vx, VF = NOT borrow"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        no_borrow = 1 if self.v_regs[y] >= self.v_regs[x] else 0
        self.v_regs[x] = (self.v_regs[y] - self.v_regs[x]) & 0xFF
        self.v_regs[0xF] = no_borrow
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHL V{x:X}")
    def _shl(self, opcode):
        """set Vx equal to Vx SHL 1, VF = the bit shifted out"""
        x = (opcode & 0x0F00) >> 8
        MSB = (self.v_regs[x] & 0x80) >> 7
        self.v_regs[x] = (self.v_regs[x] << 1) & 0xFF   # multiply by 2 and keep only the lowest 8 bits from the result
        self.v_regs[0xF] = MSB
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD I, 0x{value:03x}")
    def _set_idx(self, opcode):
        """set the value of the I register"""
        value = opcode & 0x0FFF
        self.idx = value
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP V0, 0x{address:03x}")
    def _jump_plus(self, opcode):
        address = opcode & 0x0FFF
        v0 = self.v_regs[0x0]
        self.pc = address + v0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RND V{x:X}, 0x{kk:02x}")
    def _random_byte_and(self, opcode):
        x, kk = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        rnd = self.rng.randint(0, 255)
        self.v_regs[x] = rnd & kk
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD ST, V{register:X}")
    def _set_st(self, opcode):
        """set ST = Vx"""
        register = (opcode & 0x0F00) >> 8
        self.st = self.v_regs[register]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD I, V{register:X}")
    def _add_to_idx(self, opcode):
        """set I = I + Vx, VF = 1 when the result leaves the 12-bit address space"""
        register = (opcode & 0x0F00) >> 8
        total = self.idx + self.v_regs[register]
        self.idx = total & 0xFFFF
        self.v_regs[0xF] = 1 if total > ADDRESS_SPACE_END else 0
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD F, V{register:X}")
    def _select_char(self, opcode):
        """set I to location of sprite for digit Vx"""
        register = (opcode & 0x0F00) >> 8
        self.idx = self.v_regs[register] * FONT_SPRITE_SIZE    # each character font is made of 5 bytes
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD [I], V{x:X}")
    def _store_vregs(self, opcode):
        """store registers V0 through Vx (included) in memory starting at location I"""
        x = (opcode & 0x0F00) >> 8
        self.mem[self.idx:self.idx+x+1] = self.v_regs[:x+1]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, [I]")
    def _load_vregs(self, opcode):
        """read registers V0 through Vx (included) from memory starting at location I"""
        x = (opcode & 0x0F00) >> 8
        self.v_regs[:x+1] = self.mem[self.idx:self.idx+x+1]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD B, V{x:X}")
    def _bcd_repr(self, opcode):
        """takes the decimal value of Vx and the hundreds digit in memory at I, the tens digit at I+1, the ones digit at I+2"""
        x = (opcode & 0x0F00) >> 8
        hundreds, rest = divmod(self.v_regs[x], 100)
        tens, ones = divmod(rest, 10)
        self.mem[self.idx:self.idx+3] = (hundreds, tens, ones)
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: DRW V{x:X}, V{y:X}, {n_bytes}")
    def _to_screen(self, opcode):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        x_origin, y_origin = self.v_regs[x], self.v_regs[y]
        n_bytes = opcode & 0x000F
        sprite = self.mem[self.idx:self.idx+n_bytes]
        collision = 0
        # step through each sprite byte, one screen row each
        for i, sprite_byte in enumerate(sprite):
            # coordinates wrap around the screen edges
            y_coordinate = (y_origin + i) % SCREEN_HEIGHT
            for j in range(SPRITE_WIDTH):       # step through each byte's bits, MSB first
                if not sprite_byte & (0x80 >> j):
                    continue
                x_coordinate = (x_origin + j) % SCREEN_WIDTH
                cell = x_coordinate + y_coordinate * SCREEN_WIDTH
                # sprites are XORed onto the existing screen and if this
                # causes any pixel to be erased then VF=1, otherwise VF=0
                if self.vram[cell]:
                    collision = 1
                self.vram[cell] ^= 1
        self.v_regs[0xF] = collision
        self.draw = True
        self._goto_next_instruction()
        return locals()
