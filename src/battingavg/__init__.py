"""Rolling batting average and RBI leaderboards from Jira issues."""
