"""GoalFlow: goal interview to recurring schedule pipeline."""
