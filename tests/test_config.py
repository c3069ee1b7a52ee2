"""Tests for settings and workspace wiring."""

from edumind.config import Settings
from edumind.session.workspace import StudyWorkspace
from edumind.storage.store import MemoryStore


class TestSettings:
    def test_defaults(self):
        settings = Settings(openai_api_key="test-key")
        assert settings.weak_topic_threshold == 60
        assert settings.strong_topic_threshold == 80
        assert settings.chat_autosave_interval == 4
        assert settings.max_quiz_questions == 50

    def test_store_dir_override(self, tmp_path):
        settings = Settings(openai_api_key="test-key", data_dir=tmp_path / "store")
        assert settings.store_dir == tmp_path / "store"
        assert settings.store_dir.is_dir()


class TestWorkspaceWiring:
    def test_settings_flow_into_modules(self, gateway):
        settings = Settings(
            openai_api_key="test-key",
            weak_topic_threshold=70,
            strong_topic_threshold=95,
            chat_autosave_interval=6,
            max_quiz_questions=5,
        )
        workspace = StudyWorkspace(MemoryStore(), gateway, settings)
        assert workspace.session.weak_below == 70
        assert workspace.session.strong_at == 95
        assert workspace.chat.autosave_interval == 6
        assert workspace.quiz.max_questions == 5

    def test_modules_share_one_store(self, gateway):
        workspace = StudyWorkspace(MemoryStore(), gateway)
        stores = {
            id(m.session.store)
            for m in (workspace.chat, workspace.quiz, workspace.summarizer, workspace.planner)
        }
        assert stores == {id(workspace.store)}

    def test_gateway_prompts_read_from_settings_path(self, tmp_path):
        prompts_dir = tmp_path / "config" / "prompts"
        prompts_dir.mkdir(parents=True)
        (prompts_dir / "gateway.yaml").write_text(
            "doubt_solving:\n  attachment_prompt: Look at this file.\n", encoding="utf-8"
        )
        settings = Settings(
            openai_api_key="test-key",
            project_root=tmp_path,
            data_dir=tmp_path / "store",
        )
        workspace = StudyWorkspace.from_settings(settings)
        assert workspace.gateway.attachment_prompt == "Look at this file."
        assert workspace.chat.attachment_prompt == "Look at this file."
        assert "system_prompt" in workspace.gateway.prompts["quiz"]
