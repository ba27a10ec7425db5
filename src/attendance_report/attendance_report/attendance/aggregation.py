from __future__ import annotations

from typing import Iterable

from .model import CheckInRecord, DepartmentStats, UserStats


class AggregationEngine:
    """Fold records into department rollups.

    Each call builds fresh objects, so aggregating the same list twice yields
    equal results. No ordering is promised on the returned mapping.
    """

    def aggregate(self, records: Iterable[CheckInRecord]) -> dict[str, DepartmentStats]:
        departments: dict[str, DepartmentStats] = {}

        for r in records:
            dept = departments.get(r.department)
            if dept is None:
                dept = DepartmentStats(department_name=r.department)
                departments[r.department] = dept

            user = dept.users.get(r.user_id)
            if user is None:
                user = UserStats(user_id=r.user_id, user_name=r.user_name)
                dept.users[r.user_id] = user

            if r.is_late:
                dept.total_late_count += 1
                user.late_count += 1
            else:
                dept.total_on_time_count += 1
                user.on_time_count += 1

        return departments
