from unittest.mock import MagicMock

from lightbucket_relay.events import (
    BinningMode,
    CaptureEvent,
    ImageSaveMediator,
    ImageType,
    is_light_frame,
)


def test_binning_mode_renders_as_descriptor() -> None:
    assert str(BinningMode(2, 2)) == "2x2"
    assert str(BinningMode()) == "1x1"


def test_is_light_frame_accepts_enum_and_string() -> None:
    assert is_light_frame(ImageType.LIGHT)
    assert is_light_frame("LIGHT")
    assert not is_light_frame(ImageType.DARK)
    assert not is_light_frame("FLAT")
    assert not is_light_frame("")
    assert not is_light_frame(None)


def test_capture_event_defaults_are_zero_values() -> None:
    event = CaptureEvent()

    assert event.camera_name == ""
    assert event.gain == 0
    assert event.binning is None
    assert event.image is None
    assert event.is_light is False


def test_mediator_delivers_to_subscribers_in_order() -> None:
    mediator = ImageSaveMediator()
    first, second = MagicMock(), MagicMock()
    mediator.subscribe(first)
    mediator.subscribe(second)
    event = CaptureEvent(image_type=ImageType.LIGHT)

    mediator.publish(event)

    first.assert_called_once_with(event)
    second.assert_called_once_with(event)


def test_mediator_unsubscribe_stops_delivery() -> None:
    mediator = ImageSaveMediator()
    handler = MagicMock()
    mediator.subscribe(handler)
    mediator.unsubscribe(handler)
    mediator.unsubscribe(handler)

    mediator.publish(CaptureEvent())

    handler.assert_not_called()
    assert mediator.handler_count == 0
