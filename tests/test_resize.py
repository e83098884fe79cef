from pytest import raises

from blpio.errors import NonPowerOfTwoError
from blpio.resize import (
    ResizeMode,
    closest_power_of_two,
    is_power_of_two,
    next_power_of_two,
    resize_image,
    resize_to_power_of_two
)

from conftest import solid_image


RED = (255, 0, 0, 255)
FILL = (1, 2, 3, 4)


def test_powers_of_two() -> None:
    assert is_power_of_two(1)
    assert is_power_of_two(64)
    assert not is_power_of_two(0)
    assert not is_power_of_two(12)

    assert next_power_of_two(0) == 1
    assert next_power_of_two(1) == 1
    assert next_power_of_two(5) == 8
    assert next_power_of_two(8) == 8

    assert closest_power_of_two(5) == 4
    assert closest_power_of_two(6) == 4
    assert closest_power_of_two(7) == 8
    assert closest_power_of_two(1) == 1


def test_pad() -> None:
    image = resize_image(solid_image(3, 1, RED), 4, 2, ResizeMode.PAD, FILL)
    assert (image.width, image.height) == (4, 2)

    array = image.to_array()
    assert tuple(array[0, 0]) == RED
    assert tuple(array[0, 2]) == RED
    assert tuple(array[0, 3]) == FILL
    assert (array[1] == FILL).all()


def test_pad_center() -> None:
    image = resize_image(
        solid_image(2, 2, RED),
        4,
        4,
        ResizeMode.PAD_CENTER,
        FILL
    )
    array = image.to_array()
    assert tuple(array[0, 0]) == FILL
    assert tuple(array[1, 1]) == RED
    assert tuple(array[2, 2]) == RED
    assert tuple(array[3, 3]) == FILL


def test_stretch() -> None:
    image = resize_image(solid_image(1, 1, RED), 2, 2, ResizeMode.STRETCH)
    assert image.pixels == bytes(RED) * 4


def test_non_power_of_two_target() -> None:
    with raises(NonPowerOfTwoError):
        resize_image(solid_image(2, 2, RED), 3, 4)


def test_resize_to_power_of_two() -> None:
    image = resize_to_power_of_two(solid_image(3, 5, RED))
    assert (image.width, image.height) == (4, 8)

    image = resize_to_power_of_two(
        solid_image(5, 3, RED),
        ResizeMode.STRETCH,
        prefer_larger=False
    )
    assert (image.width, image.height) == (4, 2)
    assert image.pixels == bytes(RED) * 8

    # Padding never shrinks
    image = resize_to_power_of_two(
        solid_image(5, 3, RED),
        ResizeMode.PAD,
        prefer_larger=False
    )
    assert (image.width, image.height) == (8, 4)

    source = solid_image(4, 2, RED)
    assert resize_to_power_of_two(source) is source
