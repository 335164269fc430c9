"""Tests for the interactive front end's control handling."""

from types import SimpleNamespace

import pygame
import pytest

from chladniscope.live import LiveApp


@pytest.fixture
def app(small_config, clock):
    live = LiveApp(small_config, mute=True, seed=5)
    live.session.clock = clock
    return live


def _key(key, mod=0):
    return SimpleNamespace(key=key, mod=mod)


def test_arrow_keys_change_modes(app):
    app.handle_key(_key(pygame.K_RIGHT))
    app.handle_key(_key(pygame.K_RIGHT))
    app.handle_key(_key(pygame.K_UP))
    assert (app.session.context.m, app.session.context.n) == (3, 2)
    app.handle_key(_key(pygame.K_LEFT))
    assert app.session.context.m == 2


def test_modes_clamped_at_limits(app):
    app.handle_key(_key(pygame.K_DOWN))
    assert app.session.context.n == 1
    for _ in range(20):
        app.handle_key(_key(pygame.K_RIGHT))
    assert app.session.context.m == 15


def test_scatter_key(app, clock):
    clock.advance(2.0)
    app.handle_key(_key(pygame.K_RIGHT))
    app.handle_key(_key(pygame.K_s))
    ctx = app.session.context
    assert ctx.scatter_start == 2.0
    assert (ctx.m, ctx.n) == (1, 1)
    assert ctx.pattern_should_form is True


def test_shift_scatter_holds(app):
    app.handle_key(_key(pygame.K_s, mod=pygame.KMOD_LSHIFT))
    assert app.session.context.pattern_should_form is False
    app.handle_key(_key(pygame.K_UP))
    assert app.session.context.pattern_should_form is True


def test_escape_stops(app):
    app.running = True
    app.handle_key(_key(pygame.K_ESCAPE))
    assert app.running is False


def test_record_failure_keeps_running(app, monkeypatch, capsys):
    def fail(path):
        raise RuntimeError("ffmpeg not found")

    monkeypatch.setattr(app.session, "start_recording", fail)
    app.handle_key(_key(pygame.K_r))
    assert "Error:" in capsys.readouterr().err
    assert not app.session.recorder.is_recording


def test_block_size_follows_elapsed_time(app, small_config):
    assert app._block_size(0.0) is None
    assert app._block_size(0.05) == int(0.05 * small_config.sample_rate)
    # Stalls are capped at four frames of audio
    assert app._block_size(10.0) == int(4 / small_config.fps * small_config.sample_rate)


def test_default_scale_matches_cli(small_config):
    assert LiveApp(small_config, mute=True).scale == 1.0
