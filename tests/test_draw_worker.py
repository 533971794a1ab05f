"""
Tests for the draw worker command queue.

Tests cover:
- Opening and flushing the preview buffer
- Strict command ordering
- Save, clone and delete commands
- Error reporting without stopping the worker
"""

import pytest

from PM_Libs.ContainerLib.draw_worker import DrawCommand, DrawMessage, DrawWorker
from PM_Libs.ImageEditingLib.image_models import ImageDecodeError, ImageInfo, ImageKind
from PM_Libs.ProjStoreLib.properties import SharedProperties


class Recorder:
    """Collects every worker callback in call order."""

    def __init__(self):
        self.events = []

    def callbacks(self):
        return {
            "on_flush": lambda data, dimension: self.events.append(("flush", data, dimension)),
            "on_status": lambda text: self.events.append(("status", text)),
            "on_warning": lambda text: self.events.append(("warning", text)),
            "on_cloned": lambda info: self.events.append(("cloned", info)),
            "on_deleted": lambda info: self.events.append(("deleted", info)),
            "on_error": lambda error: self.events.append(("error", error)),
        }

    def of(self, kind):
        return [event for event in self.events if event[0] == kind]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def shared():
    return SharedProperties()


@pytest.fixture
def run_worker(shared, config, fonts, recorder):
    """Run a list of messages through a fresh worker and wait for it to finish."""
    def _run(messages):
        worker = DrawWorker(shared, config, fonts, **recorder.callbacks())
        worker.start()
        for message in messages:
            worker.send(message)
        worker.stop()
        worker.join(timeout=60)
        assert not worker.is_alive()
        return worker

    return _run


class TestOpenAndFlush:
    def test_open_then_flush(self, make_image, run_worker, recorder):
        info = make_image(size=(800, 1000))

        worker = run_worker([
            DrawMessage(DrawCommand.OPEN, image_info=info),
            DrawMessage(DrawCommand.FLUSH),
        ])

        (_, data, dimension), = recorder.of("flush")
        assert dimension == (400.0, 500.0)
        assert len(data) == 400 * 500 * 3
        assert worker.container is not None
        assert recorder.of("error") == []

    def test_open_uses_current_tags_as_defaults(self, make_image, run_worker, shared):
        with shared.write() as props:
            props.tag = "#brand"

        run_worker([DrawMessage(DrawCommand.OPEN, image_info=make_image())])

        assert shared.snapshot().tag == "#brand"

    def test_too_small_image_warns(self, make_image, run_worker, recorder):
        run_worker([DrawMessage(DrawCommand.OPEN, image_info=make_image(size=(400, 500)))])

        assert len(recorder.of("warning")) == 1

    def test_decode_failure_flushes_nothing(self, tmp_path, run_worker, recorder):
        path = tmp_path / "broken.png"
        path.write_bytes(b"garbage")

        worker = run_worker([
            DrawMessage(DrawCommand.OPEN, image_info=ImageInfo(path=path, kind=ImageKind.PNG)),
            DrawMessage(DrawCommand.FLUSH),
        ])

        assert worker.container is None
        (_, error), = recorder.of("error")
        assert isinstance(error, ImageDecodeError)
        assert [event[1] for event in recorder.of("flush")] == [None, None]

    def test_commands_without_image_are_ignored(self, run_worker, recorder):
        run_worker([
            DrawMessage(DrawCommand.REDRAW_TO_BUFFER),
            DrawMessage(DrawCommand.SAVE),
            DrawMessage(DrawCommand.CHANGE_CROP, crop=(1.0, 1.0)),
            DrawMessage(DrawCommand.FLUSH),
        ])

        assert recorder.of("error") == []
        (_, data, _), = recorder.of("flush")
        assert data is None


class TestOrdering:
    def test_edit_then_redraw_is_visible_in_flush(self, make_image, shared, config, fonts, recorder):
        worker = DrawWorker(shared, config, fonts, **recorder.callbacks())
        worker.start()
        worker.send(DrawMessage(DrawCommand.OPEN, image_info=make_image(size=(800, 1000))))
        worker.send(DrawMessage(DrawCommand.FLUSH))
        worker.wait_idle()

        with shared.write() as props:
            props.translucent_layer_color = (0, 0, 0, 255)
        worker.send(DrawMessage(DrawCommand.REDRAW_TO_BUFFER))
        worker.send(DrawMessage(DrawCommand.FLUSH))
        worker.stop()
        worker.join(timeout=60)

        first, second = recorder.of("flush")
        assert first[1] != second[1]
        assert set(second[1]) == {0}

    def test_change_crop_marks_unsaved(self, make_image, run_worker, shared):
        run_worker([
            DrawMessage(DrawCommand.OPEN, image_info=make_image(size=(600, 400))),
            DrawMessage(DrawCommand.CHANGE_CROP, crop=(0.0, 0.0)),
        ])

        props = shared.snapshot()
        assert props.crop_position == (0.0, 0.0)
        assert props.is_saved is False

    def test_failing_command_does_not_stop_worker(self, make_image, run_worker, recorder):
        run_worker([
            DrawMessage(DrawCommand.OPEN),
            DrawMessage(DrawCommand.OPEN, image_info=make_image(size=(800, 1000))),
            DrawMessage(DrawCommand.FLUSH),
        ])

        (_, error), = recorder.of("error")
        assert isinstance(error, ValueError)
        (_, data, _), = recorder.of("flush")
        assert data is not None

    def test_send_rejects_other_objects(self, shared, config, fonts):
        worker = DrawWorker(shared, config, fonts)

        with pytest.raises(TypeError):
            worker.send("open")


class TestFileCommands:
    def test_save(self, make_image, run_worker, shared, recorder):
        info = make_image(size=(800, 1000))
        with shared.write() as props:
            props.tag = "#brand"

        run_worker([
            DrawMessage(DrawCommand.OPEN, image_info=info),
            DrawMessage(DrawCommand.SAVE),
        ])

        assert (info.path.parent / "photo-png.prop").exists()
        assert (info.path.parent / "export" / "photo-png.png").exists()
        statuses = [event[1] for event in recorder.of("status")]
        assert "Saving..." in statuses

    def test_clone(self, make_image, run_worker, recorder):
        info = make_image(size=(800, 1000))

        run_worker([
            DrawMessage(DrawCommand.OPEN, image_info=info),
            DrawMessage(DrawCommand.CLONE),
        ])

        (_, clone), = recorder.of("cloned")
        assert clone.path.name == "photo-copy.png"
        assert clone.path.exists()

    def test_delete(self, make_image, run_worker, recorder):
        info = make_image(size=(800, 1000))

        worker = run_worker([
            DrawMessage(DrawCommand.OPEN, image_info=info),
            DrawMessage(DrawCommand.DELETE),
            DrawMessage(DrawCommand.FLUSH),
        ])

        assert not info.path.exists()
        assert worker.container is None
        assert recorder.of("deleted") == [("deleted", info)]
        assert recorder.of("flush")[0][1] is None
