"""Release staging: version resolution, tagging, builds and artifact staging."""
