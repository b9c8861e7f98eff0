"""Gradio web interface for Text-to-SQL Explorer"""
import gradio as gr
import logging
from typing import Optional

from src.config import settings
from src.components.data_sources import DATABASE_FILE_EXTENSIONS, DataSourceManager
from src.components.models import (
    CustomSource,
    DemoSource,
    GenericMode,
    NoSource,
    QueryResult,
    SchemaDescription,
    SessionMode,
)
from src.components.session import ExplorerSession
from src.components.sql_generator import SQLGenerator, create_chat_model

logger = logging.getLogger(__name__)


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _format_ms(value: Optional[float]) -> str:
    return f"{value:.2f}ms" if value is not None else "n/a"


class ExplorerApp:
    """Main application class for Text-to-SQL Explorer"""

    def __init__(self, sql_generator: Optional[SQLGenerator] = None):
        # One chat model client per process, shared by every session
        if sql_generator is None:
            sql_generator = SQLGenerator(create_chat_model(settings))
        self.sql_generator = sql_generator

        logger.info(
            "Startup config: model=%s llm_enabled=%s demo_backend=%s max_rows=%s",
            settings.openai_model,
            self.sql_generator.available,
            settings.demo_backend,
            settings.max_rows_return,
        )

    # ------------------------------------------------------------------
    # Session State Management (per-user isolation)
    # ------------------------------------------------------------------

    def create_session(self) -> ExplorerSession:
        data_sources = DataSourceManager(
            demo_backend=settings.demo_backend,
            max_rows=settings.max_rows_return,
            max_upload_bytes=settings.max_upload_bytes,
            url_fetch_timeout=settings.url_fetch_timeout_seconds,
        )
        return ExplorerSession(data_sources, self.sql_generator)

    def _ensure_session(self, session: Optional[ExplorerSession]) -> ExplorerSession:
        """gr.State starts as None; build the session on first use."""
        if session is None:
            session = self.create_session()
        return session

    @staticmethod
    def close_session(session: Optional[ExplorerSession]) -> None:
        """Release the session's database handle when Gradio drops its state"""
        if session is not None:
            session.reset()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    @staticmethod
    def format_mode(mode: SessionMode) -> str:
        if isinstance(mode, DemoSource):
            return "🗄️ **Demo dataset** loaded"
        if isinstance(mode, CustomSource):
            return f"🗄️ **Custom database** loaded from `{mode.origin}`"
        if isinstance(mode, GenericMode):
            return "✨ **No dataset**: SQL is generated but cannot be run"
        return "Load the demo data, upload a SQLite file, load one from a URL, or use without a dataset."

    @staticmethod
    def format_schema(schema: SchemaDescription) -> str:
        """Schema tree for the side panel"""
        if schema.is_empty():
            return "*No schema loaded*"
        lines = []
        for table in schema.tables:
            lines.append(f"### {table.name}")
            lines.append("| Column | Type |")
            lines.append("|--------|------|")
            for column in table.columns:
                lines.append(f"| {_escape_cell(column.name)} | {_escape_cell(column.type or '')} |")
            lines.append("")
        return "\n".join(lines)

    @staticmethod
    def format_error(error: Optional[str]) -> str:
        if not error:
            return ""
        return f"⚠️ **Error:** {error}"

    @staticmethod
    def format_result(result: Optional[QueryResult]) -> str:
        """Error panel, empty-result notice, or a table with a footer"""
        if result is None:
            return ""
        if result.error:
            return f"❌ **Execution error**\n\n```\n{result.error}\n```"
        elapsed = _format_ms(result.execution_time_ms)
        if not result.returns_rows:
            return f"✅ Statement executed successfully (no result set).\n\n`{elapsed}`"
        if not result.rows:
            return (
                "Query executed successfully but returned no results.\n\n"
                f"`0 rows • {elapsed}`"
            )

        lines = [
            "| " + " | ".join(_escape_cell(col) for col in result.columns) + " |",
            "|" + "|".join("---" for _ in result.columns) + "|",
        ]
        for row in result.rows:
            lines.append(
                "| " + " | ".join(_escape_cell(row[col].display()) for col in result.columns) + " |"
            )

        noun = "row" if result.row_count == 1 else "rows"
        footer = f"`{result.row_count} {noun} • {elapsed}`"
        if result.truncated:
            footer += f" *(truncated to {result.row_count} rows)*"
        lines.append("")
        lines.append(footer)
        return "\n".join(lines)

    def _render(self, session: ExplorerSession):
        """Outputs shared by every event handler, in component order."""
        return (
            session,
            self.format_mode(session.mode),
            self.format_schema(session.schema),
            self.format_error(session.error),
            session.question,
            session.sql,
            gr.Button(visible=session.can_execute),
            self.format_result(session.result),
        )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def handle_load_demo(self, session):
        session = self._ensure_session(session)
        session.load_demo()
        return self._render(session)

    def handle_upload(self, path, session):
        session = self._ensure_session(session)
        session.upload_file(path)
        return self._render(session)

    def handle_load_url(self, url, session):
        session = self._ensure_session(session)
        session.load_url(url)
        return self._render(session)

    def handle_generic(self, session):
        session = self._ensure_session(session)
        session.use_without_dataset()
        return self._render(session)

    def handle_reset(self, session):
        session = self._ensure_session(session)
        session.reset()
        return self._render(session)

    def handle_generate(self, question, session):
        session = self._ensure_session(session)
        session.generate(question)
        return self._render(session)

    def handle_run(self, sql, session):
        session = self._ensure_session(session)
        session.run(sql)
        return self._render(session)

    def create_interface(self) -> gr.Blocks:
        """Create Gradio interface"""
        with gr.Blocks(title="Text-to-SQL Explorer") as demo:
            session_state = gr.State(None, delete_callback=self.close_session)

            gr.Markdown(
                "# 🧭 Text-to-SQL Explorer\n"
                "Ask questions in plain English, get SQL, run it against SQLite."
            )
            if not self.sql_generator.available:
                gr.Markdown("*Set `OPENAI_API_KEY` to enable SQL generation.*")

            with gr.Row():
                # LEFT PANE: data source + schema
                with gr.Column(scale=2):
                    mode_md = gr.Markdown(self.format_mode(NoSource()))
                    demo_btn = gr.Button("📦 Load demo data", variant="primary")
                    upload = gr.File(
                        label="Upload SQLite file",
                        file_types=DATABASE_FILE_EXTENSIONS,
                        type="filepath",
                    )
                    with gr.Row():
                        url_box = gr.Textbox(
                            label="Load from URL",
                            placeholder="https://example.com/data.sqlite",
                            scale=4,
                        )
                        url_btn = gr.Button("🔗 Load", scale=1)
                    with gr.Row():
                        generic_btn = gr.Button("✨ Use without dataset", variant="secondary")
                        reset_btn = gr.Button("🏠 Reset", variant="secondary")
                    schema_md = gr.Markdown(self.format_schema(SchemaDescription()))

                # RIGHT PANE: question, SQL editor, results
                with gr.Column(scale=5):
                    question_box = gr.Textbox(
                        label="Ask a question",
                        placeholder="How many customers are in the US?",
                        lines=2,
                    )
                    generate_btn = gr.Button("🪄 Generate SQL", variant="primary")
                    error_md = gr.Markdown()
                    sql_code = gr.Code(label="SQL", language="sql", interactive=True)
                    run_btn = gr.Button("▶️ Run Query", variant="primary", visible=False)
                    result_md = gr.Markdown()

            outputs = [
                session_state,
                mode_md,
                schema_md,
                error_md,
                question_box,
                sql_code,
                run_btn,
                result_md,
            ]

            demo_btn.click(self.handle_load_demo, inputs=[session_state], outputs=outputs)
            upload.upload(self.handle_upload, inputs=[upload, session_state], outputs=outputs)
            url_btn.click(self.handle_load_url, inputs=[url_box, session_state], outputs=outputs)
            url_box.submit(self.handle_load_url, inputs=[url_box, session_state], outputs=outputs)
            generic_btn.click(self.handle_generic, inputs=[session_state], outputs=outputs)
            reset_btn.click(self.handle_reset, inputs=[session_state], outputs=outputs)
            generate_btn.click(
                self.handle_generate, inputs=[question_box, session_state], outputs=outputs
            )
            question_box.submit(
                self.handle_generate, inputs=[question_box, session_state], outputs=outputs
            )
            run_btn.click(self.handle_run, inputs=[sql_code, session_state], outputs=outputs)

        return demo


def main():
    """Main entry point"""
    app = ExplorerApp()
    demo = app.create_interface()

    demo.queue(default_concurrency_limit=1)
    demo.launch(
        server_name=settings.server_host,
        server_port=settings.gradio_server_port,
        share=settings.gradio_share,
    )


if __name__ == "__main__":
    main()
