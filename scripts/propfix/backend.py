"""基于 git worktree 的临时工作副本。

修改只写入临时 worktree，并通过一次 `git commit` 落地；
提交失败或用户取消时直接丢弃 worktree，原仓库不受影响。
"""

from __future__ import annotations

import json
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .errors import BackendError, CommitError
from .models import Document
from .tree import dump_document

DEFAULT_AUTHOR = ("propfix", "propfix@localhost")


def run_git(cwd: Path, *args: str) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise BackendError("找不到 git 可执行文件") from exc


def _git_output(cwd: Path, *args: str) -> str:
    result = run_git(cwd, *args)
    if result.returncode != 0:
        raise BackendError(result.stderr.strip() or f"git {' '.join(args)} 执行失败")
    return result.stdout.strip()


@dataclass
class GitWorkingCopy:
    repo_root: Path
    path: Path
    model_path: Path
    branch: str
    temp_dir: Path

    def _identity_args(self) -> list[str]:
        # 未配置提交身份的环境（如 CI 容器）使用固定身份，避免提交阶段才失败。
        name = run_git(self.path, "config", "user.name").stdout.strip()
        email = run_git(self.path, "config", "user.email").stdout.strip()
        args: list[str] = []
        if not name:
            args += ["-c", f"user.name={DEFAULT_AUTHOR[0]}"]
        if not email:
            args += ["-c", f"user.email={DEFAULT_AUTHOR[1]}"]
        return args

    def commit(self, documents: Iterable[Document], message: str) -> str:
        """写回文档并以单次提交落地，返回提交哈希。

        任一步骤失败都抛出 CommitError，并原样附带 git 的错误输出。
        """

        written: list[str] = []
        for document in documents:
            path = Path(document.path)
            try:
                path.write_text(
                    json.dumps(dump_document(document), ensure_ascii=False, indent=2) + "\n",
                    encoding="utf-8",
                )
                written.append(str(path.relative_to(self.path)))
            except (OSError, ValueError) as exc:
                raise CommitError(f"无法写回 `{document.qualified_name}`: {exc}") from exc

        if not written:
            raise CommitError("没有需要提交的文档")

        result = run_git(self.path, "add", "--", *written)
        if result.returncode != 0:
            raise CommitError(result.stderr.strip())

        result = run_git(self.path, *self._identity_args(), "commit", "-m", message)
        if result.returncode != 0:
            raise CommitError(result.stderr.strip() or result.stdout.strip())

        return run_git(self.path, "rev-parse", "HEAD").stdout.strip()

    def push(self, token: str) -> None:
        result = run_git(
            self.path,
            "-c",
            f"http.extraHeader=Authorization: Bearer {token}",
            "push",
            "origin",
            self.branch,
        )
        if result.returncode != 0:
            raise CommitError(result.stderr.strip())

    def discard(self) -> None:
        run_git(self.repo_root, "worktree", "remove", "--force", str(self.path))
        run_git(self.repo_root, "worktree", "prune")
        shutil.rmtree(self.temp_dir, ignore_errors=True)


def open_working_copy(model_root: Path, branch: str) -> GitWorkingCopy:
    """为 `branch` 创建临时 worktree；分支不存在时从 HEAD 新建。

    `model_root` 可以是仓库内的子目录，worktree 中会定位到同一相对位置。
    """

    model_root = model_root.resolve()
    if not model_root.is_dir():
        raise BackendError(f"模型目录不存在: {model_root}")

    repo_root = Path(_git_output(model_root, "rev-parse", "--show-toplevel")).resolve()
    relative = model_root.relative_to(repo_root)

    temp_dir = Path(tempfile.mkdtemp(prefix="propfix-"))
    worktree = temp_dir / "wc"
    exists = run_git(repo_root, "rev-parse", "--verify", "--quiet", f"refs/heads/{branch}")
    if exists.returncode == 0:
        result = run_git(repo_root, "worktree", "add", str(worktree), branch)
    else:
        result = run_git(repo_root, "worktree", "add", "-b", branch, str(worktree), "HEAD")
    if result.returncode != 0:
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise BackendError(result.stderr.strip())

    working_copy = GitWorkingCopy(
        repo_root=repo_root,
        path=worktree,
        model_path=worktree / relative,
        branch=branch,
        temp_dir=temp_dir,
    )
    if not working_copy.model_path.is_dir():
        working_copy.discard()
        raise BackendError(f"模型目录未提交到 git 分支 `{branch}`: {relative}")
    return working_copy


def uncommitted_paths(model_root: Path) -> list[str]:
    """列出模型目录下尚未提交的改动；工作副本只包含已提交的内容。"""

    # 不能 strip 整体输出：porcelain 行首的空格是状态列的一部分。
    result = run_git(model_root.resolve(), "status", "--porcelain", "--", ".")
    if result.returncode != 0:
        raise BackendError(result.stderr.strip() or "git status 执行失败")
    return [line[3:] for line in result.stdout.splitlines() if line.strip()]
