"""HR Attendance Engine — schedule resolution and attendance report aggregation."""
