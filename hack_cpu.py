"""A small Hack CPU emulator used to run assembled programs in tests.

`HackCPU(words)` loads a program given as `0`/`1` strings (as produced by
`assembler.assemble`) or as integers. `run(max_steps)` executes until the
program reaches a halt loop (`(L) @L 0;JMP`) or the step budget runs out,
and returns the number of steps taken. RAM is a plain list of 16-bit words
stored unsigned; `read(addr)` returns the signed value.
"""

from __future__ import annotations
from typing import Iterable, List, Union

MEMORY_SIZE = 32768
WORD_MASK = 0xFFFF

# keyed by the 6 ALU control bits zx nx zy ny f no
ALU = {
    "101010": lambda d, a: 0,
    "111111": lambda d, a: 1,
    "111010": lambda d, a: -1,
    "001100": lambda d, a: d,
    "110000": lambda d, a: a,
    "001101": lambda d, a: ~d,
    "110001": lambda d, a: ~a,
    "001111": lambda d, a: -d,
    "110011": lambda d, a: -a,
    "011111": lambda d, a: d + 1,
    "110111": lambda d, a: a + 1,
    "001110": lambda d, a: d - 1,
    "110010": lambda d, a: a - 1,
    "000010": lambda d, a: d + a,
    "010011": lambda d, a: d - a,
    "000111": lambda d, a: a - d,
    "000000": lambda d, a: d & a,
    "010101": lambda d, a: d | a,
}


def to_signed(value: int) -> int:
    value &= WORD_MASK
    return value - 0x10000 if value & 0x8000 else value


class HackCPU:
    def __init__(self, program: Iterable[Union[str, int]]):
        self.rom: List[int] = [int(w, 2) if isinstance(w, str) else w for w in program]
        self.ram: List[int] = [0] * MEMORY_SIZE
        self.a = 0
        self.d = 0
        self.pc = 0
        self.halted = False

    def read(self, address: int) -> int:
        return to_signed(self.ram[address])

    def write(self, address: int, value: int) -> None:
        self.ram[address] = value & WORD_MASK

    def is_halt_loop(self, pc: int) -> bool:
        """True when ROM[pc] is `@pc` followed by an unconditional jump."""
        if pc + 1 >= len(self.rom):
            return False
        return self.rom[pc] == pc and (self.rom[pc + 1] & 0xE007) == 0xE007

    def step(self) -> None:
        word = self.rom[self.pc]
        if not word & 0x8000:
            self.a = word
            self.pc += 1
            return

        bits = format(word, "016b")
        a_bit, control, dest, jump = bits[3], bits[4:10], bits[10:13], bits[13:]
        y = self.ram[self.a & 0x7FFF] if a_bit == "1" else self.a
        out = to_signed(ALU[control](to_signed(self.d), to_signed(y)))

        address = self.a & 0x7FFF
        if dest[2] == "1":
            self.write(address, out)
        if dest[1] == "1":
            self.d = out & WORD_MASK
        if dest[0] == "1":
            self.a = out & WORD_MASK

        taken = (
            (jump[0] == "1" and out < 0)
            or (jump[1] == "1" and out == 0)
            or (jump[2] == "1" and out > 0)
        )
        self.pc = address if taken else self.pc + 1

    def run(self, max_steps: int = 1_000_000) -> int:
        steps = 0
        while steps < max_steps and 0 <= self.pc < len(self.rom):
            if self.is_halt_loop(self.pc):
                self.halted = True
                break
            self.step()
            steps += 1
        return steps
