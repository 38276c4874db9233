# skydodge/env/dodge_env.py
from __future__ import annotations
from typing import Optional, Tuple, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from ..game.config import PlayfieldConfig, DEFAULT_PLAYFIELD
from ..game.render import Renderer
from ..game.session import GameSession
from .observations import build_observation, observation_bounds

NOOP, UP, DOWN = 0, 1, 2


class DodgeEnv(gym.Env):
    """
    SkyDodge Gymnasium environment (vector observations).
    - Simulation at 60 Hz, one movement tick per simulation tick.
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Actions: 0 = NOOP, 1 = UP, 2 = DOWN (held for the whole decision).
    - Observation: shape (8,), float32 (see observations.build_observation).
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 30.0,
                 config: PlayfieldConfig = DEFAULT_PLAYFIELD):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.config = config

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            # decisions per second = fps / frame_skip
            self.time_limit_decisions = int(self.config.fps * time_limit_seconds / self.frame_skip)

        # --- Gym spaces ---
        self.action_space = gym.spaces.Discrete(3)
        low, high = observation_bounds()
        self.observation_space = gym.spaces.Box(low=low, high=high, dtype=np.float32)

        # --- Runtime state ---
        self.session: Optional[GameSession] = None
        self.timestep: int = 0
        self.current_seed: Optional[int] = None

        # Rendering
        self.screen = None
        self.clock = None
        self.renderer: Optional[Renderer] = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)

        # Same seed -> same spawn sequence; no seed -> fresh random sequence
        if self.session is None:
            self.session = GameSession(config=self.config, seed=seed)
        else:
            self.session.pool.reseed(seed)
        self.session.reset()

        self.timestep = 0
        self.current_seed = self.session.seed

        obs = self._get_obs()
        info = {"seed": self.current_seed, "score": 0}
        return obs, info

    def step(self, action):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.session is not None, "call reset() before step()"
        s = self.session

        s.buttons_released()
        if action == UP:
            s.move_up_pressed()
        elif action == DOWN:
            s.move_down_pressed()

        for _ in range(self.frame_skip):
            s.step()
            if not s.running:
                break

        # Reward: +1 if alive after this decision; -1 on death
        reward = 1.0 if s.running else -1.0

        self.timestep += 1
        terminated = not s.running
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = self._get_obs()
        info = {
            "score": s.state.score,
            "speed": s.state.speed,
            "timestep": self.timestep,
            "seed": self.current_seed,
            "obstacles": len(s.state.obstacles),
        }

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # -------------------- Helpers --------------------

    def _get_obs(self) -> np.ndarray:
        assert self.session is not None
        s = self.session
        return build_observation(s.snapshot(), s.state.speed, s.scale, self.config.initial_speed)

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.session is None:
            return None

        snap = self.session.snapshot()
        size: Tuple[int, int] = (int(snap.width_px), int(snap.height_px))
        if self.renderer is None:
            pygame.init()
            self.renderer = Renderer()

        if self.render_mode == "human":
            if self.screen is None:
                self.screen = pygame.display.set_mode(size)
                pygame.display.set_caption("SkyDodge — Gym Env")
                self.clock = pygame.time.Clock()
            # Pump minimal event queue so the OS doesn't think we're hung
            pygame.event.pump()
            self.renderer.draw(self.screen, snap)
            pygame.display.flip()
            if self.clock is not None:
                self.clock.tick(self.metadata.get("render_fps", 60))
            return None

        if self.screen is None:
            self.screen = pygame.Surface(size)
        self.renderer.draw(self.screen, snap)
        # (W, H, 3) -> (H, W, 3)
        arr = pygame.surfarray.array3d(self.screen)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
            self.renderer = None
