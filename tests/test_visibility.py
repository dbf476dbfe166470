import uuid

from app.models.group_post import GroupPost
from app.models.post import Post
from app.services import visibility


def _post(author_id, *, is_public=True) -> Post:
    return Post(id=uuid.uuid4(), author_id=author_id, content="hello", is_public=is_public)


def _group_post(group_id, author_id) -> GroupPost:
    return GroupPost(id=uuid.uuid4(), group_id=group_id, author_id=author_id, content="hello")


def test_public_post_is_visible_to_anyone() -> None:
    author, viewer = uuid.uuid4(), uuid.uuid4()
    assert visibility.can_view_post(viewer, _post(author), set())


def test_private_post_is_visible_to_author_only() -> None:
    author, viewer = uuid.uuid4(), uuid.uuid4()
    post = _post(author, is_public=False)
    assert visibility.can_view_post(author, post, set())
    assert not visibility.can_view_post(viewer, post, set())


def test_blocking_hides_post_in_either_direction() -> None:
    author, viewer = uuid.uuid4(), uuid.uuid4()
    post = _post(author)
    # blocked_ids is symmetric: it holds users the viewer blocked and users who blocked the viewer.
    assert not visibility.can_view_post(viewer, post, {author})


def test_author_always_sees_own_post() -> None:
    author = uuid.uuid4()
    assert visibility.can_view_post(author, _post(author, is_public=False), {author})


def test_group_post_needs_membership() -> None:
    group, author, viewer = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    post = _group_post(group, author)
    assert visibility.can_view_group_post(viewer, post, set(), {group})
    assert not visibility.can_view_group_post(viewer, post, set(), set())
    assert not visibility.can_view_group_post(viewer, post, set(), {uuid.uuid4()})


def test_blocked_author_group_post_is_hidden_from_members() -> None:
    group, author, viewer = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    post = _group_post(group, author)
    assert not visibility.can_view_group_post(viewer, post, {author}, {group})


def test_visible_posts_keeps_order_and_drops_hidden() -> None:
    viewer, friend, blocked = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    posts = [
        _post(friend),
        _post(blocked),
        _post(friend, is_public=False),
        _post(viewer, is_public=False),
    ]
    visible = visibility.visible_posts(viewer, posts, {blocked})
    assert visible == [posts[0], posts[3]]


def test_visible_group_posts_filters_each_group() -> None:
    viewer, author = uuid.uuid4(), uuid.uuid4()
    mine, theirs = uuid.uuid4(), uuid.uuid4()
    posts = [_group_post(mine, author), _group_post(theirs, author)]
    assert visibility.visible_group_posts(viewer, posts, set(), {mine}) == [posts[0]]
