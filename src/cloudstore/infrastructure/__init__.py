"""Reference implementations of the collaborators the write path calls into."""
