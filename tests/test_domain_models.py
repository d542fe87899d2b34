"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from sos_matching.domain.models import (
    Location,
    Match,
    MatchRequest,
    MatchStats,
    MatchStatus,
    ResourceCandidate,
    SkillCandidate,
)

NOW = datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)


def _request_payload(**overrides):
    payload = {
        "requestId": "sos-1",
        "disasterId": "dis-1",
        "location": {"latitude": 23.81, "longitude": 90.41},
        "urgency": "critical",
    }
    payload.update(overrides)
    return payload


def _skill_match(**overrides):
    fields = dict(
        match_id="match-1",
        request_id="sos-1",
        volunteer_id="vol-1",
        skill_id="sk-1",
        skill_type="medic",
        match_score=7.5,
        distance=3.2,
        trust_score=8.0,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Match(**fields)


class TestMatchRequest:
    def test_minimal_camel_case_payload(self):
        request = MatchRequest.model_validate(_request_payload())

        assert request.request_id == "sos-1"
        assert request.disaster_type is None
        assert request.required_skills == []
        assert request.required_resources == []
        assert request.urgency == "critical"
        assert request.location == Location(latitude=23.81, longitude=90.41)

    def test_snake_case_names_accepted(self):
        request = MatchRequest(
            request_id="sos-1",
            disaster_id="dis-1",
            location=Location(latitude=0, longitude=0),
            urgency="low",
        )
        assert request.disaster_id == "dis-1"

    def test_null_lists_become_empty(self):
        request = MatchRequest.model_validate(
            _request_payload(requiredSkills=None, requiredResources=None)
        )
        assert request.required_skills == []
        assert request.required_resources == []

    def test_disaster_type_stored_as_value(self):
        request = MatchRequest.model_validate(_request_payload(disasterType="fire"))
        assert request.disaster_type == "fire"

    def test_all_errors_reported_together(self):
        with pytest.raises(ValidationError) as exc_info:
            MatchRequest.model_validate(
                {"requestId": "sos-1", "location": {"longitude": 1}, "urgency": "whenever"}
            )

        locations = {tuple(err["loc"]) for err in exc_info.value.errors()}
        assert ("disasterId",) in locations
        assert ("location", "latitude") in locations
        assert ("urgency",) in locations

    @pytest.mark.parametrize("radius", [0, -5])
    def test_radius_must_be_positive(self, radius):
        with pytest.raises(ValidationError):
            MatchRequest.model_validate(_request_payload(radius=radius))

    def test_unknown_disaster_type_rejected(self):
        with pytest.raises(ValidationError):
            MatchRequest.model_validate(_request_payload(disasterType="meteor"))


class TestCandidates:
    def test_skill_candidate_defaults(self):
        candidate = SkillCandidate.model_validate(
            {
                "skillId": "sk-1",
                "userId": "vol-1",
                "skillType": "medic",
                "location": {"latitude": 1, "longitude": 2},
            }
        )
        assert candidate.verified is False
        assert candidate.availability == ""
        assert candidate.trust_score is None

    def test_skill_candidate_trust_range(self):
        with pytest.raises(ValidationError):
            SkillCandidate.model_validate(
                {
                    "skillId": "sk-1",
                    "userId": "vol-1",
                    "skillType": "medic",
                    "location": {"latitude": 1, "longitude": 2},
                    "trustScore": 11,
                }
            )

    def test_resource_candidate_requires_owner(self):
        with pytest.raises(ValidationError):
            ResourceCandidate.model_validate(
                {
                    "resourceId": "r-1",
                    "resourceType": "boat",
                    "location": {"latitude": 1, "longitude": 2},
                }
            )


class TestMatch:
    def test_skill_match(self):
        match = _skill_match()
        assert match.status == MatchStatus.PENDING
        assert match.is_skill_match
        assert not match.is_resource_match

    def test_resource_match_has_no_trust_score(self):
        match = Match(
            match_id="match-2",
            request_id="sos-1",
            volunteer_id="owner-1",
            resource_id="r-1",
            resource_type="boat",
            match_score=8.0,
            distance=1.0,
            created_at=NOW,
            updated_at=NOW,
        )
        assert match.is_resource_match
        assert match.trust_score is None

    def test_resource_match_with_trust_rejected(self):
        with pytest.raises(ValidationError, match="trust score"):
            Match(
                match_id="match-2",
                request_id="sos-1",
                volunteer_id="owner-1",
                resource_id="r-1",
                resource_type="boat",
                match_score=8.0,
                distance=1.0,
                trust_score=5.0,
                created_at=NOW,
                updated_at=NOW,
            )

    def test_both_skill_and_resource_rejected(self):
        with pytest.raises(ValidationError, match="exactly one"):
            _skill_match(resource_id="r-1", resource_type="boat")

    def test_neither_skill_nor_resource_rejected(self):
        with pytest.raises(ValidationError, match="exactly one"):
            _skill_match(skill_id=None, skill_type=None)

    def test_accepted_and_rejected_exclusive(self):
        with pytest.raises(ValidationError, match="both accepted and rejected"):
            _skill_match(accepted_at=NOW, rejected_at=NOW)

    @pytest.mark.parametrize("score", [-0.1, 10.1])
    def test_score_bounds(self, score):
        with pytest.raises(ValidationError):
            _skill_match(match_score=score)

    def test_naive_timestamps_become_utc(self):
        match = _skill_match(created_at=datetime(2025, 11, 4, 12, 0))
        assert match.created_at.tzinfo == timezone.utc

    def test_offset_timestamps_converted(self):
        plus_one = timezone(timedelta(hours=1))
        match = _skill_match(updated_at=datetime(2025, 11, 4, 13, 0, tzinfo=plus_one))
        assert match.updated_at == NOW

    def test_to_response_is_camel_case_json(self):
        body = _skill_match().to_response()

        assert body["matchId"] == "match-1"
        assert body["volunteerId"] == "vol-1"
        assert body["matchScore"] == 7.5
        assert body["trustScore"] == 8.0
        assert body["status"] == "pending"
        assert body["resourceType"] is None
        assert isinstance(body["createdAt"], str)


def test_match_stats_defaults():
    stats = MatchStats()
    assert stats.total_matches == 0
    assert stats.average_match_time == "00:00:00"
    assert stats.model_dump(by_alias=True)["averageMatchTime"] == "00:00:00"
