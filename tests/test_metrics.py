"""
Tests for team metrics, hourly analysis and the hour analysis card.
"""

import json

import numpy as np
import pytest

from core.calculations.metrics import (
    compute_metrics,
    hour_summary,
    hourly_lines_frame,
    progress_status,
    rating_for,
    star_rating,
)
from core.pickers.models import InvalidPickerDataError


class TestComputeMetrics:

    def test_team_totals(self, team):
        metrics = compute_metrics(team)
        assert metrics.total_lines == 150
        assert metrics.average_lines_per_picker == pytest.approx(50.0)
        assert metrics.efficiency_score == pytest.approx(45.4545, rel=1e-4)

    def test_average_per_hour_ignores_idle_hours(self, team):
        # Lines only in hours 9 and 10
        assert compute_metrics(team).average_lines_per_hour == pytest.approx(75.0)

    def test_best_and_worst_performer(self, team):
        metrics = compute_metrics(team)
        assert metrics.best_performer.picker_id == '2'
        assert metrics.best_performer.lines == 70
        assert metrics.best_performer.efficiency == pytest.approx(70 / 120)
        assert metrics.worst_performer.picker_id == '3'
        assert metrics.worst_performer.lines == 30

    def test_ties_go_to_first_picker(self, make_picker):
        pickers = [
            make_picker('Ann', 100, {9: 20}),
            make_picker('Bo', 100, {10: 20}),
        ]
        metrics = compute_metrics(pickers)
        assert metrics.best_performer.picker_id == 'ann'
        assert metrics.worst_performer.picker_id == 'ann'

    def test_empty_team(self):
        metrics = compute_metrics([])
        assert metrics.total_lines == 0
        assert metrics.average_lines_per_picker == 0
        assert metrics.average_lines_per_hour == 0
        assert metrics.efficiency_score == 0
        assert metrics.hourly_analysis == []
        assert metrics.best_performer.to_dict() == {
            'pickerId': '', 'name': '', 'lines': 0, 'efficiency': 0.0
        }

    def test_zero_target_never_divides(self, make_picker):
        metrics = compute_metrics([make_picker('Ann', 0, {9: 10})])
        assert metrics.efficiency_score == 0.0
        assert metrics.best_performer.efficiency == 0.0

    def test_accepts_picker_dicts(self, team, team_dicts):
        assert compute_metrics(team_dicts).to_dict() == compute_metrics(team).to_dict()

    def test_invalid_input_raises_before_computing(self, team):
        with pytest.raises(InvalidPickerDataError):
            compute_metrics("not a list")
        with pytest.raises(InvalidPickerDataError):
            compute_metrics(team + [None])

    def test_idempotent(self, team):
        assert compute_metrics(team).to_dict() == compute_metrics(team).to_dict()

    def test_does_not_mutate_input(self, team):
        before = [p.to_dict() for p in team]
        compute_metrics(team)
        assert [p.to_dict() for p in team] == before

    def test_json_round_trip_without_nan(self, team, make_picker):
        pickers = team + [make_picker('Zero', 0, {11: 5})]
        data = compute_metrics(pickers).to_dict()
        encoded = json.dumps(data, allow_nan=False)
        assert json.loads(encoded) == data

    def test_output_has_no_numpy_scalars(self, team):
        def walk(value):
            if isinstance(value, dict):
                for v in value.values():
                    walk(v)
            elif isinstance(value, list):
                for v in value:
                    walk(v)
            else:
                assert not isinstance(value, np.generic)

        walk(compute_metrics(team).to_dict())


class TestHourlyAnalysis:

    def test_one_entry_per_shift_hour(self, team):
        analysis = compute_metrics(team).hourly_analysis
        assert [h.hour for h in analysis] == list(range(9, 18))

    def test_hour_totals_and_top_performer(self, team):
        nine = compute_metrics(team).hourly_analysis[0]
        assert nine.total_lines == 95
        assert nine.average_lines == pytest.approx(95 / 3)
        assert nine.top_performer.picker_id == '2'
        assert nine.top_performer.lines == 40
        # Stored entry efficiency: 40 / 15
        assert nine.top_performer.efficiency == pytest.approx(40 / 15)

    def test_idle_hour_reports_first_picker(self, team):
        eleven = compute_metrics(team).hourly_analysis[2]
        assert eleven.total_lines == 0
        assert eleven.top_performer.picker_id == '1'
        assert eleven.top_performer.lines == 0

    def test_sparse_hourly_data(self, make_picker):
        picker = make_picker('Ann', 100)
        picker.hourly_data = []
        analysis = compute_metrics([picker]).hourly_analysis
        assert all(h.total_lines == 0 for h in analysis)
        assert all(h.top_performer.efficiency == 0.0 for h in analysis)


class TestHourlyLinesFrame:

    def test_shape_and_labels(self, team):
        frame = hourly_lines_frame(team)
        assert frame.shape == (9, 3)
        assert list(frame.index) == list(range(9, 18))
        assert list(frame.columns) == ['1', '2', '3']
        assert frame.loc[9, '2'] == 40
        assert frame.to_numpy().sum() == 150

    def test_empty_team(self):
        assert hourly_lines_frame([]).shape == (9, 0)


class TestHourSummary:

    def test_first_hour(self, team):
        summary = hour_summary(team, 9)
        # Average daily target 110 -> 13.75 -> 14 per picker per hour
        assert summary.target_per_picker == 14
        assert summary.target == 42
        assert summary.picker_count == 3
        assert summary.lines == 95
        assert summary.completion_rate == 100
        assert summary.rating == 'Excellent'
        assert summary.cumulative_lines == 95
        assert summary.cumulative_target == 42
        assert summary.deficit == 235

    def test_cumulative_through_later_hour(self, team):
        summary = hour_summary(team, 11)
        assert summary.lines == 0
        assert summary.cumulative_lines == 150
        assert summary.cumulative_target == 126
        assert summary.completion_rate == 0
        assert summary.rating == 'Critical'
        assert summary.deficit == 180
        # (180 / 6) / 42 * 100 - 100
        assert summary.acceleration_needed == pytest.approx(30 / 42 * 100 - 100)

    def test_inactive_pickers_excluded(self, make_picker):
        pickers = [
            make_picker('Ann', 80, {9: 10}),
            make_picker('Bo', 800, {9: 500}, status='offline'),
        ]
        summary = hour_summary(pickers, 9)
        assert summary.picker_count == 1
        assert summary.target_per_picker == 10
        assert summary.lines == 10
        assert summary.completion_rate == 100

    def test_default_target_when_no_active_targets(self):
        summary = hour_summary([], 10, default_hourly_target=50)
        assert summary.target_per_picker == 50
        assert summary.target == 0
        assert summary.completion_rate == 0
        assert summary.consistency_score == 80

    def test_no_acceleration_in_last_hour(self, team):
        assert hour_summary(team, 17).acceleration_needed == 0.0

    def test_to_dict_keys(self, team):
        data = hour_summary(team, 9).to_dict()
        assert data['completionRate'] == 100
        assert data['targetPerPicker'] == 14
        json.dumps(data, allow_nan=False)


class TestBands:

    @pytest.mark.parametrize("rate,expected", [
        (100, 'Excellent'), (85, 'Good'), (84, 'Acceptable'),
        (70, 'Acceptable'), (50, 'Needs Improvement'), (49, 'Critical'),
    ])
    def test_rating_for(self, rate, expected):
        assert rating_for(rate) == expected

    @pytest.mark.parametrize("percentage,expected", [
        (120, 'On Target'), (100, 'On Target'), (80, 'Slightly Behind'), (79.9, 'Behind Schedule'),
    ])
    def test_progress_status(self, percentage, expected):
        assert progress_status(percentage) == expected

    @pytest.mark.parametrize("performance,target,stars", [
        (100, 100, 5), (90, 100, 4), (80, 100, 3), (70, 100, 2), (10, 100, 1), (50, 0, 1),
    ])
    def test_star_rating(self, performance, target, stars):
        assert star_rating(performance, target) == stars
