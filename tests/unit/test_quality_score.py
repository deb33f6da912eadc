from showfinder.features.show_review.domain import UntrustedPayload
from showfinder.features.show_review.quality import score_submission


def test_complete_submission_scores_full_marks():
    result = score_submission(
        UntrustedPayload(
            {
                "name": "Collectors Expo",
                "startDate": "October 4, 2025",
                "city": "Austin",
                "state": "TX",
                "venueName": "Expo Hall",
                "description": "Hundreds of tables.",
            }
        )
    )

    assert result.score == 100
    assert result.issues == []


def test_empty_submission_floors_at_zero():
    result = score_submission(UntrustedPayload({"state": "Texas", "description": "<p>hi</p>"}))

    assert result.score == 0
    assert "Missing name" in result.issues
    assert "HTML artifacts in description" in result.issues


def test_schedule_counts_as_start_date():
    result = score_submission(
        UntrustedPayload(
            {
                "name": "Weekend Show",
                "dailySchedule": [{"date": "2025-10-04"}],
                "city": "Austin",
                "address": "1 Main St",
            }
        )
    )

    assert result.score == 100
    assert "Missing start date" not in result.issues


def test_date_range_is_flagged_without_penalty():
    result = score_submission(
        UntrustedPayload(
            {
                "name": "Range",
                "startDate": "Oct 4-5",
                "city": "Austin",
                "venueName": "Hall",
            }
        )
    )

    assert result.score == 100
    assert "Date format issues" in result.issues


def test_full_state_name_costs_five_points():
    result = score_submission(
        UntrustedPayload(
            {
                "name": "Show",
                "startDate": "2025-10-04",
                "city": "Austin",
                "state": "Texas",
                "venueName": "Hall",
            }
        )
    )

    assert result.score == 95
    assert result.recommendations == ["Approve with STATE_FULL feedback"]
