# pyglet front end: a window that schedules the CPU and timer ticks, maps the
# physical keyboard onto the hex keypad and blits the framebuffer.

import logging

import pyglet
from pyglet.window import key

from .config import CPU_HZ, TIMER_HZ, scale as default_scale, width, height
from .errors import Chip8Error
from .render import to_rgba

logger = logging.getLogger(__name__)

# Key mapping - maps physical keyboard keys to CHIP-8 keypad
#   1 2 3 4        1 2 3 C
#   Q W E R   ->   4 5 6 D
#   A S D F        7 8 9 E
#   Z X C V        A 0 B F
keymap = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


class Chip8Window(pyglet.window.Window):

    def __init__(self, cpu, scale=default_scale, cpu_hz=CPU_HZ, timer_hz=TIMER_HZ):
        self.scale = scale
        self.window_width, self.window_height = width * scale, height * scale
        super().__init__(
            width=self.window_width,
            height=self.window_height,
            caption="CHIP-8 Emulator",
            resizable=False,
            vsync=False
        )
        self.cpu = cpu
        self.keypad = cpu.keypad

        # Performance tracking counters
        self._fps_counter = 0
        self._cps_counter = 0
        self._bench_time = pyglet.clock.get_default().time()

        # Labels for HUD
        self.fps_label = self._hud_label("FPS: 0", 15)
        self.cps_label = self._hud_label("Cycles/s: 0", 30)
        self.sound_label = self._hud_label("", 45)

        # creating ImageData once, updated in place on each frame
        self.image = pyglet.image.ImageData(
            self.window_width,
            self.window_height,
            'RGBA',
            to_rgba(cpu.framebuffer.snapshot(), self.scale).tobytes()
        )
        cpu.framebuffer.dirty = False

        # Schedule the loops
        pyglet.clock.schedule_interval(self._cpu_tick, 1.0 / cpu_hz)
        pyglet.clock.schedule_interval(self._timer_tick, 1.0 / timer_hz)
        pyglet.clock.schedule_interval(self._update_bench, 1.0)

    def _hud_label(self, text, offset):
        return pyglet.text.Label(
            text,
            font_size=12,
            x=5,
            y=self.window_height - offset,
            anchor_x='left',
            anchor_y='center',
            color=(255, 255, 0, 255)
        )

    # ---- CPU cycle ----
    def _cpu_tick(self, dt):
        if self.cpu.halted:
            return
        try:
            self.cpu.step()
            self._cps_counter += 1
        except Chip8Error as e:
            logger.error("Emulation error: %s", e)
            self.close()

    # ---- timers ----
    def _timer_tick(self, dt):
        frame = self.cpu.tick()
        # only re-upload the texture when something was drawn since the last tick
        if self.cpu.framebuffer.dirty:
            self.cpu.framebuffer.dirty = False
            self.image.set_data('RGBA', self.window_width * 4, to_rgba(frame, self.scale).tobytes())
        self.sound_label.text = "BEEP" if self.cpu.sound_active else ""

    # FPS / CPS
    def _update_bench(self, dt):
        now = pyglet.clock.get_default().time()
        elapsed = now - self._bench_time
        if elapsed >= 1.0:
            self.fps_label.text = f"FPS: {self._fps_counter / elapsed:.1f}"
            self.cps_label.text = f"Cycles/s: {self._cps_counter}"
            self._fps_counter = 0
            self._cps_counter = 0
            self._bench_time = now

    # ---- Drawing ----
    def on_draw(self):
        self.clear()
        self.image.blit(0, 0)

        self.fps_label.draw()
        self.cps_label.draw()
        self.sound_label.draw()
        self._fps_counter += 1

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.F1:
            # toggle instruction trace
            root = logging.getLogger("chip8emu")
            root.setLevel(logging.INFO if root.isEnabledFor(logging.DEBUG) else logging.DEBUG)
            logger.info("Trace logging: %s", root.isEnabledFor(logging.DEBUG))
        elif symbol in keymap:
            self.keypad.press(keymap[symbol])

    def on_key_release(self, symbol, modifiers):
        if symbol in keymap:
            self.keypad.release(keymap[symbol])

    def on_close(self):
        pyglet.clock.unschedule(self._cpu_tick)
        pyglet.clock.unschedule(self._timer_tick)
        pyglet.clock.unschedule(self._update_bench)
        super().on_close()


def run(cpu, **kwargs):
    Chip8Window(cpu, **kwargs)
    pyglet.app.run()
