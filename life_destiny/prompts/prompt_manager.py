import time
import yaml
import threading
import logging
from pathlib import Path
from typing import Optional

from jinja2 import Template, TemplateError
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from life_destiny.config import PROMPTS_FILE_PATH

logger = logging.getLogger(__name__)


class PromptReloadHandler(FileSystemEventHandler):
    """文件变化处理器"""

    def __init__(self, prompt_manager):
        self.prompt_manager = prompt_manager
        self.last_modified = 0

    def on_modified(self, event):
        if event.is_directory:
            return
        if Path(event.src_path).resolve() != self.prompt_manager.prompts_file_path.resolve():
            return

        # 某些编辑器一次保存会触发多次
        current_time = time.time()
        if current_time - self.last_modified < 1.0:
            return
        self.last_modified = current_time

        logger.info(f"检测到提示词文件变化: {event.src_path}")
        self.prompt_manager.reload_prompts()


class PromptManager:
    """提示词管理器，支持热更新"""

    def __init__(self, prompts_file_path: Optional[str] = None, watch: bool = True):
        """
        Args:
            prompts_file_path: 提示词文件路径，默认为 config.PROMPTS_FILE_PATH
            watch: 是否启动文件监控
        """
        self.prompts_file_path = Path(prompts_file_path or PROMPTS_FILE_PATH)
        self._lock = threading.RLock()
        self._prompts = {}
        self._observer = None

        if not self.prompts_file_path.exists():
            logger.error(f"提示词文件不存在: {self.prompts_file_path}")

        self.reload_prompts()

        if watch:
            self._start_file_watcher()

    def reload_prompts(self):
        """重新加载提示词文件，解析失败时保留上一次的内容"""
        with self._lock:
            if not self.prompts_file_path.exists():
                logger.error(f"提示词文件不存在: {self.prompts_file_path}")
                return
            try:
                with open(self.prompts_file_path, 'r', encoding='utf-8') as f:
                    prompts_data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                logger.error(f"YAML解析错误: {e}")
                return
            except OSError as e:
                logger.error(f"读取提示词文件失败: {e}")
                return

            if not isinstance(prompts_data, dict):
                logger.error("提示词文件为空或格式错误")
                return

            self._prompts = prompts_data
            logger.info(f"提示词已重新加载，共 {len(prompts_data)} 项")

    def _start_file_watcher(self):
        try:
            self._observer = Observer()
            self._observer.schedule(PromptReloadHandler(self), str(self.prompts_file_path.parent), recursive=False)
            self._observer.start()
            logger.info(f"已启动提示词文件监控: {self.prompts_file_path.parent}")
        except OSError as e:
            self._observer = None
            logger.warning(f"启动文件监控失败: {e}，将使用手动重新加载")

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._prompts.get(key, default)

    def render_prompt(self, key: str, **kwargs) -> str:
        """
        获取并渲染 Jinja2 提示词模板

        Raises:
            RuntimeError: 模板不存在或渲染失败
        """
        template = self.get(key)
        if not template:
            raise RuntimeError(f"提示词键 '{key}' 不存在或为空，请检查 {self.prompts_file_path}")
        try:
            return Template(template).render(**kwargs)
        except TemplateError as e:
            logger.error(f"提示词模板 '{key}' 渲染失败: {e}")
            raise RuntimeError(f"提示词模板 '{key}' 渲染失败: {e}") from e

    def stop(self):
        """停止文件监控"""
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            logger.info("提示词文件监控已停止")


# 全局单例
_prompt_manager_instance = None
_prompt_manager_lock = threading.Lock()


def get_prompt_manager(prompts_file_path: Optional[str] = None) -> PromptManager:
    """获取全局提示词管理器单例"""
    global _prompt_manager_instance

    if _prompt_manager_instance is None:
        with _prompt_manager_lock:
            if _prompt_manager_instance is None:
                _prompt_manager_instance = PromptManager(prompts_file_path)

    return _prompt_manager_instance
