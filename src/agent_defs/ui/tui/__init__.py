"""Full-screen terminal browser."""
