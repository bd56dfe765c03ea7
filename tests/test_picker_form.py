"""
Tests for the submitted-entry types returned by the sidebar forms.
"""

import pytest

from ui.picker_form import NewPickerEntry, PickerEditEntry


class TestNewPickerEntry:

    def test_positive_target(self):
        assert NewPickerEntry(name='Ann', target=800).target == 800

    @pytest.mark.parametrize("target", [0, -5])
    def test_non_positive_target_rejected(self, target):
        with pytest.raises(ValueError, match="positive"):
            NewPickerEntry(name='Ann', target=target)


class TestPickerEditEntry:

    def test_status_change(self):
        entry = PickerEditEntry(picker_id='1', name='Ann', target=100, status='break')
        assert entry.status == 'break'
        assert entry.delete is False

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError, match="Invalid status"):
            PickerEditEntry(picker_id='1', name='Ann', target=100, status='lunch')

    def test_zero_target_rejected_for_update(self):
        with pytest.raises(ValueError, match="positive"):
            PickerEditEntry(picker_id='1', name='Ann', target=0, status='active')

    def test_delete_keeps_stored_values(self):
        entry = PickerEditEntry(picker_id='1', name='Ann', target=0, status='active', delete=True)
        assert entry.delete is True
