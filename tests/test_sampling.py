import random

import pytest

from perception_eval.models.project_model import ImageItem
from perception_eval.services.sampling import select_images, shuffle

from conftest import make_project, sequence_source


def test_shuffle_with_zero_source_matches_fisher_yates():
    # i=2: j=0 → [c, b, a], i=1: j=0 → [b, c, a]
    assert shuffle(["a", "b", "c"], sequence_source([0.0, 0.0])) == ["b", "c", "a"]


def test_shuffle_with_high_source_is_identity():
    assert shuffle([1, 2, 3, 4], lambda: 0.999) == [1, 2, 3, 4]


def test_shuffle_clamps_source_returning_one():
    assert sorted(shuffle([1, 2, 3], lambda: 1.0)) == [1, 2, 3]


def test_shuffle_does_not_touch_input():
    items = [1, 2, 3]
    shuffle(items, sequence_source([0.0, 0.0]))
    assert items == [1, 2, 3]


@pytest.mark.parametrize("n_valid,image_count", [(0, 3), (1, 3), (5, 3), (3, 3), (4, 0), (10, 7)])
def test_select_images_caps_and_has_no_duplicates(n_valid, image_count):
    project = make_project(n_images=n_valid, image_count=image_count, blank=2)
    rng = random.Random(n_valid * 31 + image_count)

    selected = select_images(project.images, project.image_count, rng.random)

    assert len(selected) == min(n_valid, image_count)
    ids = [img.id for img in selected]
    assert len(set(ids)) == len(ids)
    assert set(ids) <= {img.id for img in project.valid_images}


def test_select_images_filters_blank_urls():
    images = [ImageItem(id="a", url=""), ImageItem(id="b", url="   "), ImageItem(id="c", url="x.png")]
    assert [img.id for img in select_images(images, 5)] == ["c"]
