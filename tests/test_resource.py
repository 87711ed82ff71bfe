"""Tests for resource.py."""

from statuscheck.resource import Deployment, Status


class TestDeployment:
    def test_display_identity(self):
        assert str(Deployment("dep", "test", 10)) == "test:deployment/dep"

    def test_initial_state(self):
        d = Deployment("dep", "test", 10)
        assert d.status == Status()
        assert not d.is_done()

    def test_update_status_overwrites(self):
        d = Deployment("dep", "test", 10)
        err = RuntimeError("boom")
        d.update_status("pending", err)
        d.update_status("running")
        assert d.status == Status("running", None)
        assert not d.is_done()

    def test_mark_done_is_idempotent(self):
        d = Deployment("dep", "test", 10)
        d.update_status("success")
        d.mark_done()
        d.mark_done()
        assert d.is_done()
        assert d.status.details == "success"

    def test_update_after_done_is_ignored(self):
        d = Deployment("dep", "test", 10)
        d.update_status("success")
        d.mark_done()
        d.update_status("error", RuntimeError("late"))
        assert d.status == Status("success", None)

    def test_equality(self):
        assert Deployment("dep", "test", 10) == Deployment("dep", "test", 10.0)
        assert Deployment("dep", "test", 10) != Deployment("dep", "test", 20)
        assert Deployment("dep", "test", 10) != Deployment("dep", "test1", 10)
