import json
import logging
import os
from pathlib import Path
from typing import Optional

INPUT_FORMATS = ("text", "json")
OUTPUT_FORMATS = ("text", "json")

DEFAULT_SETTINGS = {
    "max_count": 200,  # 从仓库读取的最大提交数
    "id_length": 8,  # 文本输出中 id 的显示长度
    "output_format": "text",  # text 或 json
    "all_refs": False,  # 读取所有引用 (--all)
}


class Settings:
    def __init__(self, config_dir: Optional[str] = None):
        # 配置目录，默认在用户主目录下
        self.config_dir = config_dir or os.path.join(str(Path.home()), ".lanegraph")
        self.config_file = os.path.join(self.config_dir, "settings.json")

        self.settings = dict(DEFAULT_SETTINGS)

        # 加载已有设置
        self.load_settings()

    def load_settings(self):
        """加载设置"""
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r", encoding="utf-8") as f:
                    saved_settings = json.load(f)
                if isinstance(saved_settings, dict):
                    self.settings.update(saved_settings)
                else:
                    logging.warning("Ignoring settings file %s: expected a JSON object", self.config_file)
        except (OSError, ValueError) as e:
            logging.warning(f"加载设置失败：{e!s}")

    def save_settings(self):
        """保存设置"""
        try:
            os.makedirs(self.config_dir, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logging.error(f"保存设置失败：{e!s}")

    def _get_int(self, key: str) -> int:
        """读取整数设置，类型不对时回退为默认值"""
        value = self.settings.get(key, DEFAULT_SETTINGS[key])
        # bool is an int subclass but never a valid count
        if not isinstance(value, int) or isinstance(value, bool):
            logging.warning("Invalid %s %r in settings, using %d", key, value, DEFAULT_SETTINGS[key])
            return DEFAULT_SETTINGS[key]
        return value

    def get_max_count(self) -> int:
        return self._get_int("max_count")

    def set_max_count(self, max_count: int):
        self.settings["max_count"] = max_count
        self.save_settings()

    def get_id_length(self) -> int:
        return self._get_int("id_length")

    def set_id_length(self, id_length: int):
        self.settings["id_length"] = id_length
        self.save_settings()

    def get_output_format(self) -> str:
        """获取输出格式，未知值回退为 text"""
        output_format = self.settings.get("output_format", DEFAULT_SETTINGS["output_format"])
        if output_format not in OUTPUT_FORMATS:
            logging.warning("Unknown output_format %r in settings, using text", output_format)
            return "text"
        return output_format

    def set_output_format(self, output_format: str):
        self.settings["output_format"] = output_format
        self.save_settings()

    def get_all_refs(self) -> bool:
        return bool(self.settings.get("all_refs", DEFAULT_SETTINGS["all_refs"]))


# 创建全局settings实例
settings = Settings()
