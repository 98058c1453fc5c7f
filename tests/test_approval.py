import logging

import pytest

from business import approval
from business import hangout as hangout_service
from business.errors import ConflictError, ForbiddenError, NotFoundError, ValidationFailureError
from business.social_graph import ConnectionDegree, SocialGraph
from database import connection_request as connection_request_repo
from database import hangout as hangout_repo
from database import user as user_repo
from database.user import User


def _user(user_id, friends=(), approved=()):
    return User(
        id=user_id,
        name=user_id.capitalize(),
        first_degree_friend_ids=list(friends),
        approved_second_degree_connections=list(approved),
    )


def test_plan_all_first_degree_needs_no_requests():
    host = _user("host", friends=["a", "b"])
    graph = SocialGraph([host, _user("a"), _user("b")])

    plan = approval.plan_connection_requests(host, ["a", "b"], graph)

    assert plan.requests == []
    assert plan.initial_status == "pending"


def test_plan_second_degree_routes_to_first_mutual_friend():
    host = _user("host", friends=["m2", "m1"])
    candidate = _user("cand", friends=["m1", "m2"])
    graph = SocialGraph([host, candidate, _user("m1"), _user("m2")])

    plan = approval.plan_connection_requests(host, ["cand"], graph)

    assert len(plan.requests) == 1
    request = plan.requests[0]
    assert request.requester_id == "host"
    assert request.requested_id == "cand"
    # host's list order decides, not the candidate's
    assert request.approver_id == "m2"
    assert plan.initial_status == "pending_approval"


def test_plan_previously_approved_needs_no_request():
    host = _user("host", friends=["m"], approved=["cand"])
    graph = SocialGraph([host, _user("cand", friends=["m"]), _user("m")])

    plan = approval.plan_connection_requests(host, ["cand"], graph)

    assert plan.requests == []
    assert plan.participants == [("cand", ConnectionDegree.APPROVED_SECOND_DEGREE)]


def test_plan_unreachable_is_kept_without_request(caplog):
    host = _user("host", friends=["a"])
    graph = SocialGraph([host, _user("a"), _user("lonely")])

    with caplog.at_level(logging.WARNING):
        plan = approval.plan_connection_requests(host, ["a", "lonely"], graph)

    assert plan.requests == []
    assert plan.unreachable_ids == ["lonely"]
    assert plan.initial_status == "pending"
    assert "no approval path" in caplog.text


@pytest.fixture
def gated_hangout(make_graph):
    """host -> mutual -> stranger, with a hangout waiting on mutual's approval."""
    make_graph(
        {
            "host": ["friend", "mutual"],
            "friend": [],
            "mutual": ["host"],
            "stranger": ["mutual"],
        }
    )
    hangout = hangout_service.create_hangout("host", ["friend", "stranger"], "Bowling")
    [request] = connection_request_repo.list_connection_requests(hangout_id=hangout.id)
    return hangout, request


def test_approval_releases_hangout_and_grants_standing(gated_hangout):
    hangout, request = gated_hangout
    assert hangout.status == "pending_approval"
    assert request.approver_id == "mutual"

    resolved = approval.resolve_connection_request(request.id, "mutual", "approved")

    assert resolved.status == "approved"
    assert hangout_repo.get_hangout_by_id(hangout.id).status == "pending"
    assert user_repo.get_user_by_id("host").approved_second_degree_connections == ["stranger"]
    # one-directional
    assert user_repo.get_user_by_id("stranger").approved_second_degree_connections == []


def test_rejection_also_releases_hangout_without_standing(gated_hangout):
    hangout, request = gated_hangout

    approval.resolve_connection_request(request.id, "mutual", "rejected")

    assert hangout_repo.get_hangout_by_id(hangout.id).status == "pending"
    assert user_repo.get_user_by_id("host").approved_second_degree_connections == []


def test_only_the_approver_can_resolve(gated_hangout):
    _, request = gated_hangout
    with pytest.raises(ForbiddenError):
        approval.resolve_connection_request(request.id, "host", "approved")
    assert connection_request_repo.get_connection_request_by_id(request.id).status == "pending"


def test_request_cannot_be_resolved_twice(gated_hangout):
    _, request = gated_hangout
    approval.resolve_connection_request(request.id, "mutual", "approved")
    with pytest.raises(ConflictError):
        approval.resolve_connection_request(request.id, "mutual", "rejected")


def test_unknown_request_and_decision(gated_hangout):
    _, request = gated_hangout
    with pytest.raises(NotFoundError):
        approval.resolve_connection_request("missing", "mutual", "approved")
    with pytest.raises(ValidationFailureError):
        approval.resolve_connection_request(request.id, "mutual", "maybe")


def test_approved_pair_skips_approval_next_time(gated_hangout):
    _, request = gated_hangout
    approval.resolve_connection_request(request.id, "mutual", "approved")

    second = hangout_service.create_hangout("host", ["stranger"], "Karaoke")

    assert second.status == "pending"
    assert second.participant_degrees == {"stranger": "approved_second_degree"}
    assert connection_request_repo.list_connection_requests(hangout_id=second.id) == []


def test_hangout_waits_for_every_request(make_graph):
    make_graph(
        {
            "host": ["m1", "m2"],
            "m1": [],
            "m2": [],
            "s1": ["m1"],
            "s2": ["m2"],
        }
    )
    hangout = hangout_service.create_hangout("host", ["s1", "s2"], "Road trip")
    requests = {
        r.approver_id: r
        for r in connection_request_repo.list_connection_requests(hangout_id=hangout.id)
    }
    assert set(requests) == {"m1", "m2"}

    approval.resolve_connection_request(requests["m1"].id, "m1", "approved")
    assert hangout_repo.get_hangout_by_id(hangout.id).status == "pending_approval"
    assert connection_request_repo.count_pending_for_hangout(hangout.id) == 1

    approval.resolve_connection_request(requests["m2"].id, "m2", "approved")
    assert hangout_repo.get_hangout_by_id(hangout.id).status == "pending"


def test_release_leaves_cancelled_hangout_alone(gated_hangout):
    hangout, _ = gated_hangout
    hangout_service.cancel_hangout(hangout.id, "host")

    assert approval.release_approval_gate(hangout.id) is False
    assert hangout_repo.get_hangout_by_id(hangout.id).status == "cancelled"


def test_pending_requests_listed_for_approver(gated_hangout):
    _, request = gated_hangout
    assert [r.id for r in approval.list_pending_requests_for_approver("mutual")] == [request.id]
    assert approval.list_pending_requests_for_approver("host") == []


def test_failed_grant_leaves_request_and_hangout_untouched(gated_hangout, monkeypatch):
    hangout, request = gated_hangout

    def fail_grant(cur, user_id, approved_user_id):
        raise RuntimeError("approved connection insert failed")

    with monkeypatch.context() as m:
        m.setattr(user_repo, "insert_approved_connection", fail_grant)
        with pytest.raises(RuntimeError):
            approval.resolve_connection_request(request.id, "mutual", "approved")

    assert connection_request_repo.get_connection_request_by_id(request.id).status == "pending"
    assert connection_request_repo.count_pending_for_hangout(hangout.id) == 1
    assert hangout_repo.get_hangout_by_id(hangout.id).status == "pending_approval"
    assert user_repo.get_user_by_id("host").approved_second_degree_connections == []

    # nothing was lost, the approver can simply try again
    approval.resolve_connection_request(request.id, "mutual", "approved")
    assert hangout_repo.get_hangout_by_id(hangout.id).status == "pending"
    assert user_repo.get_user_by_id("host").approved_second_degree_connections == ["stranger"]


def test_sibling_resolutions_release_gate_once(make_graph, monkeypatch):
    make_graph(
        {
            "host": ["m1", "m2"],
            "m1": [],
            "m2": [],
            "s1": ["m1"],
            "s2": ["m2"],
        }
    )
    hangout = hangout_service.create_hangout("host", ["s1", "s2"], "Camping")
    requests = connection_request_repo.list_connection_requests(hangout_id=hangout.id)

    transitions = []
    update_status = hangout_repo.update_status

    def recording_update_status(cur, hangout_id, from_statuses, to_status):
        changed = update_status(cur, hangout_id, from_statuses, to_status)
        transitions.append(changed)
        return changed

    monkeypatch.setattr(hangout_repo, "update_status", recording_update_status)

    for request in requests:
        approval.resolve_connection_request(request.id, request.approver_id, "rejected")
    assert approval.release_approval_gate(hangout.id) is False

    assert transitions.count(True) == 1
    assert hangout_repo.get_hangout_by_id(hangout.id).status == "pending"
