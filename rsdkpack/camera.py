"""Stage camera: boundary tracking, player following and screen shake."""

from __future__ import annotations

from dataclasses import dataclass

SCREEN_XSIZE = 424
SCREEN_YSIZE = 240
SCREEN_CENTERY = SCREEN_YSIZE // 2
SCREEN_SCROLL_UP = SCREEN_YSIZE // 2 - 16
SCREEN_SCROLL_DOWN = SCREEN_YSIZE // 2 + 16

FAST_Y_VELOCITY = 0x60000
CD_SHIFT_SPEED = 0x5F5C2
CD_OFFSET_LIMIT = 63


@dataclass
class Target:
    """The entity a camera follows; positions and speeds are 16.16 fixed point."""

    x_pos: int = 0
    y_pos: int = 0
    x_velocity: int = 0
    y_velocity: int = 0
    speed: int = 0
    direction: int = 0
    gravity: int = 0
    track_scroll: bool = False
    look_pos: int = 0
    cam_offset_x: int = 0


def _next_shake(value: int) -> int:
    if not value:
        return value
    return ~value if value <= 0 else -value


@dataclass
class Camera:
    """Camera state and the scroll boundaries of the current stage."""

    style: int = 0
    enabled: int = 1
    adjust_y: int = 0
    x_scroll_offset: int = 0
    y_scroll_offset: int = 0
    x_pos: int = 0
    y_pos: int = 0
    shift: int = 0
    locked_y: bool = False
    shake_x: int = 0
    shake_y: int = 0
    cur_x_boundary1: int = 0
    new_x_boundary1: int = 0
    cur_y_boundary1: int = 0
    new_y_boundary1: int = 0
    cur_x_boundary2: int = 0
    cur_y_boundary2: int = 0
    new_x_boundary2: int = 0
    new_y_boundary2: int = 0
    screen_width: int = SCREEN_XSIZE

    @property
    def center_x(self) -> int:
        return self.screen_width // 2

    # Boundary handling

    def _update_top_boundary(self) -> None:
        if self.new_y_boundary1 > self.cur_y_boundary1:
            if self.new_y_boundary1 >= self.y_scroll_offset:
                self.cur_y_boundary1 = self.y_scroll_offset
            else:
                self.cur_y_boundary1 = self.new_y_boundary1
        if self.new_y_boundary1 < self.cur_y_boundary1:
            if self.cur_y_boundary1 >= self.y_scroll_offset:
                self.cur_y_boundary1 -= 1
            else:
                self.cur_y_boundary1 = self.new_y_boundary1

    def _update_bottom_boundary(self, target: Target, use_velocity: bool) -> None:
        screen_bottom = self.y_scroll_offset + SCREEN_YSIZE
        if self.new_y_boundary2 < self.cur_y_boundary2:
            if self.cur_y_boundary2 <= screen_bottom or self.new_y_boundary2 >= screen_bottom:
                self.cur_y_boundary2 -= 1
            else:
                self.cur_y_boundary2 = screen_bottom
        if self.new_y_boundary2 > self.cur_y_boundary2:
            if screen_bottom >= self.cur_y_boundary2:
                self.cur_y_boundary2 += 1
                if use_velocity and target.y_velocity > 0:
                    step = target.y_velocity >> 16
                    if self.new_y_boundary2 < self.cur_y_boundary2 + step:
                        self.cur_y_boundary2 = self.new_y_boundary2
                    else:
                        self.cur_y_boundary2 += step
            else:
                self.cur_y_boundary2 = self.new_y_boundary2

    def _update_x_boundaries(self, target: Target) -> None:
        if self.new_x_boundary1 > self.cur_x_boundary1:
            if self.x_scroll_offset <= self.new_x_boundary1:
                self.cur_x_boundary1 = self.x_scroll_offset
            else:
                self.cur_x_boundary1 = self.new_x_boundary1
        if self.new_x_boundary1 < self.cur_x_boundary1:
            if self.x_scroll_offset <= self.cur_x_boundary1:
                self.cur_x_boundary1 -= 1
                if target.x_velocity < 0:
                    self.cur_x_boundary1 += target.x_velocity >> 16
                    if self.cur_x_boundary1 < self.new_x_boundary1:
                        self.cur_x_boundary1 = self.new_x_boundary1
            else:
                self.cur_x_boundary1 = self.new_x_boundary1

        screen_right = self.screen_width + self.x_scroll_offset
        if self.new_x_boundary2 < self.cur_x_boundary2:
            if self.new_x_boundary2 > screen_right:
                self.cur_x_boundary2 = self.new_x_boundary2
            else:
                self.cur_x_boundary2 = screen_right
        if self.new_x_boundary2 > self.cur_x_boundary2:
            if screen_right >= self.cur_x_boundary2:
                self.cur_x_boundary2 += 1
                if target.x_velocity > 0:
                    self.cur_x_boundary2 += target.x_velocity >> 16
                    if self.cur_x_boundary2 > self.new_x_boundary2:
                        self.cur_x_boundary2 = self.new_x_boundary2
            else:
                self.cur_x_boundary2 = self.new_x_boundary2

    def _update_boundaries(self, target: Target) -> None:
        self._update_top_boundary()
        self._update_bottom_boundary(target, use_velocity=True)
        self._update_x_boundaries(target)

    def _apply_shake(self) -> None:
        self.shake_x = _next_shake(self.shake_x)
        self.shake_y = _next_shake(self.shake_y)

    @staticmethod
    def _track_scroll_step(dif: int) -> int:
        """Vertical step while the target asks the camera to track it."""
        if dif <= 0:
            step = dif + 32
            if step > 0:
                return 0
            return -16 if step <= -17 else step
        step = dif - 32
        if step < 0:
            return 0
        return 16 if step >= 17 else step

    def _finish_vertical(self, target: Target, new_cam_y: int) -> int:
        if new_cam_y <= self.cur_y_boundary1 + (SCREEN_SCROLL_UP - 1):
            new_cam_y = self.cur_y_boundary1 + SCREEN_SCROLL_UP
        self.y_pos = new_cam_y
        if self.cur_y_boundary2 - (SCREEN_SCROLL_DOWN - 1) <= new_cam_y:
            new_cam_y = self.cur_y_boundary2 - SCREEN_SCROLL_DOWN
            self.y_pos = new_cam_y
        return new_cam_y

    def _set_y_scroll(self, cam_y: int, target: Target) -> None:
        pos = cam_y + target.look_pos - SCREEN_SCROLL_UP
        self.y_scroll_offset = self.cur_y_boundary1 if pos < self.cur_y_boundary1 else pos
        y = self.cur_y_boundary2 - SCREEN_YSIZE
        if self.cur_y_boundary2 - (SCREEN_YSIZE - 1) > self.y_scroll_offset:
            y = self.y_scroll_offset
        self.y_scroll_offset = self.shake_y + y

    # Follow modes

    def follow(self, target: Target) -> None:
        """Standard camera: a dead zone around the target with capped steps."""
        target_x = target.x_pos >> 16
        target_y = self.adjust_y + (target.y_pos >> 16)
        self._update_boundaries(target)

        x_dif = target_x - self.x_pos
        if target_x > self.x_pos:
            x_dif -= 8
            if x_dif < 0:
                x_dif = 0
            elif x_dif >= 17:
                x_dif = 16
        else:
            x_dif += 8
            if x_dif > 0:
                x_dif = 0
            elif x_dif <= -17:
                x_dif = -16

        centered = self.x_pos + x_dif
        if centered < self.center_x + self.cur_x_boundary1:
            centered = self.center_x + self.cur_x_boundary1
        right_limit = self.cur_x_boundary2 - self.center_x
        if right_limit < centered:
            centered = right_limit
        self.x_pos = centered

        fast = abs(target.y_velocity) > FAST_Y_VELOCITY
        y_dif = target_y - self.y_pos
        if target.track_scroll:
            y_dif = self._track_scroll_step(y_dif)
            self.locked_y = False
        elif target_y <= self.y_pos:
            if y_dif >= -32 and not fast:
                if y_dif < -6:
                    y_dif = -6
            elif y_dif < -16:
                y_dif = -16
        elif y_dif > 32 or fast:
            if y_dif > 16:
                y_dif = 16
            else:
                self.locked_y = True
        elif y_dif <= 6:
            self.locked_y = True
        else:
            y_dif = 6

        self._finish_vertical(target, self.y_pos + y_dif)
        self.x_scroll_offset = self.shake_x + centered - self.center_x
        self._set_y_scroll(self.y_pos, target)
        self._apply_shake()

    def _recenter_offset(self, target: Target) -> None:
        if target.cam_offset_x < 0:
            target.cam_offset_x += 2
        if target.cam_offset_x > 0:
            target.cam_offset_x -= 2

    def _step_y(self, dif: int) -> None:
        limit = self.cur_y_boundary1 + SCREEN_SCROLL_UP
        self.y_pos = self.y_pos + dif if self.y_pos + dif >= limit else limit

    def follow_cd_style(self, target: Target) -> None:
        """Camera that leads ahead of a fast-moving target."""
        target_x = target.x_pos >> 16
        target_y = self.adjust_y + (target.y_pos >> 16)
        self._update_boundaries(target)

        if not target.gravity:
            if target.direction:
                if self.style == 3 or target.speed < -CD_SHIFT_SPEED:
                    self.shift = 2
                    if target.cam_offset_x <= CD_OFFSET_LIMIT:
                        target.cam_offset_x += 2
                else:
                    self.shift = 0
                    self._recenter_offset(target)
            elif self.style == 2 or target.speed > CD_SHIFT_SPEED:
                self.shift = 1
                if target.cam_offset_x >= -CD_OFFSET_LIMIT:
                    target.cam_offset_x -= 2
            else:
                self.shift = 0
                self._recenter_offset(target)
        elif self.shift == 1:
            if target.cam_offset_x >= -CD_OFFSET_LIMIT:
                target.cam_offset_x -= 2
        elif self.shift < 1:
            self._recenter_offset(target)
        elif self.shift == 2:
            if target.cam_offset_x <= CD_OFFSET_LIMIT:
                target.cam_offset_x += 2
        self.x_pos = target_x - target.cam_offset_x

        fast = abs(target.y_velocity) > FAST_Y_VELOCITY
        if target.track_scroll:
            self.locked_y = False
            self._step_y(self._track_scroll_step(target_y - self.y_pos))
        elif self.locked_y:
            self.y_pos = target_y
            self._step_y(0)
        elif target_y > self.y_pos:
            dif = target_y - self.y_pos
            if dif > 32 or fast:
                if dif > 16:
                    dif = 16
                else:
                    self.locked_y = True
            elif dif > 6:
                dif = 6
            else:
                self.locked_y = True
            self._step_y(dif)
        else:
            dif = target_y - self.y_pos
            if dif < -32 or fast:
                if dif < -16:
                    dif = -16
                else:
                    self.locked_y = True
                self._step_y(dif)
            elif dif < -6:
                self._step_y(-6)

        if self.y_pos >= self.cur_y_boundary2 - SCREEN_SCROLL_DOWN - 1:
            self.y_pos = self.cur_y_boundary2 - SCREEN_SCROLL_DOWN

        x = max(self.cur_x_boundary1, self.x_pos - self.center_x)
        if x > self.cur_x_boundary2 - self.screen_width:
            x = self.cur_x_boundary2 - self.screen_width

        y = max(self.cur_y_boundary1, target.look_pos + self.y_pos - SCREEN_SCROLL_UP)
        if self.cur_y_boundary2 - SCREEN_YSIZE - 1 <= y:
            y = self.cur_y_boundary2 - SCREEN_YSIZE

        self.x_scroll_offset = self.shake_x + x
        self.y_scroll_offset = self.shake_y + y
        self._apply_shake()

    def follow_h_locked(self, target: Target) -> None:
        """Camera that follows vertically only, keeping its horizontal position."""
        target_y = self.adjust_y + (target.y_pos >> 16)

        if self.new_y_boundary1 <= self.cur_y_boundary1:
            if self.cur_y_boundary1 > self.y_scroll_offset:
                self.cur_y_boundary1 -= 1
            else:
                self.cur_y_boundary1 = self.new_y_boundary1
        elif self.new_y_boundary1 >= self.y_scroll_offset:
            self.cur_y_boundary1 = self.y_scroll_offset
        else:
            self.cur_y_boundary1 = self.new_y_boundary1
        self._update_bottom_boundary(target, use_velocity=True)
        self._update_x_boundaries(target)

        fast = abs(target.y_velocity) > FAST_Y_VELOCITY
        scroll = target_y - self.y_pos
        if target.track_scroll:
            scroll = self._track_scroll_step(scroll)
            self.locked_y = False
        elif self.locked_y:
            scroll = 0
        elif target_y > self.y_pos:
            if scroll > 32 or fast:
                if scroll > 16:
                    scroll = 16
                else:
                    self.locked_y = True
            elif scroll > 6:
                scroll = 6
            else:
                self.locked_y = True
        elif scroll < -32 or fast:
            if scroll < -16:
                scroll = -16
            else:
                self.locked_y = True
        elif scroll >= -6:
            self.locked_y = True
        else:
            scroll = -6

        new_cam_y = self._finish_vertical(target, self.y_pos + scroll)
        self.x_scroll_offset = self.shake_x + self.x_pos - self.center_x
        self._set_y_scroll(new_cam_y, target)
        self._apply_shake()

    def follow_locked(self, target: Target) -> None:
        """Keep the camera still, only easing the boundaries and the shake."""
        self._update_top_boundary()
        self._update_bottom_boundary(target, use_velocity=False)
        self._update_x_boundaries(target)
        self._apply_shake()

    def follow_fixed(self, target: Target) -> None:
        """Centre the camera exactly on the target, within the boundaries."""
        target_x = target.x_pos >> 16
        target_y = self.adjust_y + (target.y_pos >> 16)
        self._update_boundaries(target)

        if target_x < self.center_x + self.cur_x_boundary1:
            target_x = self.center_x + self.cur_x_boundary1
        right_limit = self.cur_x_boundary2 - self.center_x
        if right_limit < target_x:
            target_x = right_limit
        self.x_pos = target_x

        if target_y <= self.cur_y_boundary1 + (SCREEN_CENTERY - 1):
            target_y = self.cur_y_boundary1 + SCREEN_CENTERY
        if self.cur_y_boundary2 - (SCREEN_CENTERY - 1) <= target_y:
            target_y = self.cur_y_boundary2 - SCREEN_CENTERY
        self.y_pos = target_y

        self.x_scroll_offset = self.shake_x + target_x - self.center_x
        cam_y = target_y + target.look_pos - SCREEN_CENTERY
        self.y_scroll_offset = self.cur_y_boundary1 if self.cur_y_boundary1 > cam_y else cam_y
        y = self.cur_y_boundary2 - SCREEN_YSIZE
        if self.cur_y_boundary2 - (SCREEN_YSIZE - 1) > self.y_scroll_offset:
            y = self.y_scroll_offset
        self.y_scroll_offset = self.shake_y + y
        self._apply_shake()

    def update(self, target: Target) -> None:
        """Run the follow mode chosen by ``enabled`` and ``style`` for one frame."""
        if self.enabled != 1:
            self.follow_locked(target)
        elif self.style == 0:
            self.follow(target)
        elif self.style in (1, 2, 3):
            self.follow_cd_style(target)
        elif self.style == 4:
            self.follow_h_locked(target)