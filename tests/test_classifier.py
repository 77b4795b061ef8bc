import pytest

from maze_explorer.classifier import INDETERMINATE, ObstacleClassifier, color_name
from maze_explorer.config import MazeConfig
from maze_explorer.errors import ConfigError
from maze_explorer.grid import OBSTACLE, TRAVERSABLE


@pytest.fixture
def classifier():
    return ObstacleClassifier()


@pytest.mark.parametrize("code", [1, 5])
def test_black_and_red_are_obstacles(classifier, code):
    assert classifier.classify(code) == OBSTACLE


@pytest.mark.parametrize("code", [6, 7])
def test_white_and_brown_are_traversable(classifier, code):
    assert classifier.classify(code) == TRAVERSABLE


@pytest.mark.parametrize("code", [0, 2, 3, 4, 8, -1, None])
def test_other_codes_are_indeterminate(classifier, code):
    assert classifier.classify(code) == INDETERMINATE


def test_classification_is_stable(classifier):
    for code in range(8):
        assert classifier.classify(code) == classifier.classify(code)


def test_custom_colour_sets():
    classifier = ObstacleClassifier(obstacle_colors={2}, traversable_colors={3, 4})
    assert classifier.classify(2) == OBSTACLE
    assert classifier.classify(1) == INDETERMINATE
    assert classifier.classify(4) == TRAVERSABLE


def test_overlapping_sets_rejected():
    with pytest.raises(ConfigError):
        ObstacleClassifier(obstacle_colors={1, 6}, traversable_colors={6})


def test_distance_classification():
    classifier = ObstacleClassifier.from_config(MazeConfig(wall_threshold_mm=200))
    assert classifier.classify_distance(120) == OBSTACLE
    assert classifier.classify_distance(200) == TRAVERSABLE
    assert classifier.classify_distance(None) == INDETERMINATE
    assert classifier.classify_distance(0) == INDETERMINATE
    assert ObstacleClassifier().classify_distance(50) == INDETERMINATE


def test_color_names():
    assert color_name(1) == "BLACK"
    assert color_name(7) == "BROWN"
    assert color_name(42) == "?"
    assert color_name(None) == "?"
