"""HTTP routers for StudyHub, one per resource."""
