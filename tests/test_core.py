"""
Broken Files Creator - Core Test Suite
설정, 이름 생성, 파일 수집, 스케줄러, 컨트롤러 테스트
"""

import contextlib
import errno
import io
import os
import random
import sys
import tempfile
from pathlib import Path
from unittest import mock

# 프로젝트 루트 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


KEEP_ALL = {"truncate": 0.0, "delete": 0.0, "replace": 0.0}


class FixedRandom(random.Random):
    """정해진 접미사를 순서대로 반환하는 난수 생성기"""

    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)

    def getrandbits(self, k):
        return self.values.pop(0)


def make_files(root, files):
    paths = []
    for name, data in files.items():
        path = os.path.join(root, name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        Path(path).write_bytes(data)
        paths.append(path)
    return paths


def variant_key(path):
    """출력 이름에서 랜덤 접미사를 뺀 키"""
    return os.path.basename(path).split("_RAND_")[0]


class TestNamer:
    """출력 이름 생성 테스트"""

    def test_split_name(self):
        from core.namer import split_name

        assert split_name("/data/in/archive.tar.gz") == ("archive.tar", "gz")
        assert split_name("/data/.bashrc") == ("", "bashrc")

    def test_split_name_without_extension(self):
        """디렉토리 이름의 점은 확장자로 보지 않음"""
        from core.namer import MissingExtensionError, split_name

        try:
            split_name("/data/dir.d/Makefile")
        except MissingExtensionError:
            return
        raise AssertionError("MissingExtensionError expected")

    def test_free_path_format(self):
        from core.namer import VariantNamer

        with tempfile.TemporaryDirectory() as tmp:
            namer = VariantNamer(tmp)
            path = namer.free_path("image", "png", 3, FixedRandom([42]))

            assert path == os.path.join(tmp, "image_IDX_3_RAND_42.png")

    def test_free_path_skips_existing(self):
        """이미 존재하는 이름은 다시 뽑음"""
        from core.namer import VariantNamer

        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "a_IDX_0_RAND_1.txt").write_bytes(b"x")
            namer = VariantNamer(tmp)
            path = namer.free_path("a", "txt", 0, FixedRandom([1, 2]))

            assert path.endswith("a_IDX_0_RAND_2.txt")

    def test_name_attempts_exhausted(self):
        """시도 제한 초과 시 OSError 계열 에러"""
        from core.namer import NameAttemptsExhaustedError, VariantNamer

        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "a_IDX_0_RAND_7.txt").write_bytes(b"x")
            namer = VariantNamer(tmp, max_attempts=2)
            try:
                namer.free_path("a", "txt", 0, FixedRandom([7, 7]))
            except OSError as e:
                assert isinstance(e, NameAttemptsExhaustedError)
                return
        raise AssertionError("NameAttemptsExhaustedError expected")

    def test_write_variant(self):
        from core.namer import VariantNamer

        with tempfile.TemporaryDirectory() as tmp:
            namer = VariantNamer(tmp)
            path = namer.write_variant("doc", "json", 1, b"{broken", random.Random())

            assert Path(path).read_bytes() == b"{broken"
            assert path.endswith(".json")

    def test_write_variant_retries_taken_name(self):
        """검사 후 다른 워커가 이름을 먼저 만들면 기존 파일은 보존하고 다음 접미사 사용"""
        from core.namer import VariantNamer

        with tempfile.TemporaryDirectory() as tmp:
            taken = Path(tmp, "a_IDX_0_RAND_1.txt")
            taken.write_bytes(b"other")
            namer = VariantNamer(tmp)

            # 존재 검사를 통과한 직후 생성된 상황 재현
            with mock.patch("core.namer.os.path.exists", return_value=False):
                path = namer.write_variant("a", "txt", 0, b"mine", FixedRandom([1, 2]))

            assert path == os.path.join(tmp, "a_IDX_0_RAND_2.txt")
            assert Path(path).read_bytes() == b"mine"
            assert taken.read_bytes() == b"other"

    def test_write_variant_removes_partial_file(self):
        """쓰기 실패 시 반쯤 쓰인 파일을 남기지 않음"""
        from core.namer import VariantNamer

        real_open = open

        class FailingWriter:
            def __init__(self, f):
                self.f = f

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                self.f.close()
                return False

            def write(self, data):
                raise OSError(errno.ENOSPC, "No space left on device")

        with tempfile.TemporaryDirectory() as tmp:
            namer = VariantNamer(tmp)
            with mock.patch("core.namer.open", side_effect=lambda p, m: FailingWriter(real_open(p, m)), create=True):
                try:
                    namer.write_variant("a", "txt", 0, b"data", random.Random(0))
                except OSError as e:
                    assert e.errno == errno.ENOSPC
                else:
                    raise AssertionError("OSError expected")

            assert os.listdir(tmp) == []


class TestConfig:
    """설정 테스트"""

    def test_defaults(self):
        from core.config import DEFAULTS, load_config

        config = load_config()
        assert config == DEFAULTS
        assert config is not DEFAULTS

    def test_yaml_config(self):
        """YAML 설정 파일 로드"""
        from core.config import Mode, MutationConfig, load_config

        with tempfile.TemporaryDirectory() as tmp:
            config_path = os.path.join(tmp, "config.yaml")
            Path(config_path).write_text(
                f"output_dir: {tmp}\n"
                "copies: 3\n"
                "mode: character\n"
                "special_words: [let, ';']\n"
                "chances:\n"
                "  truncate: 0.05\n",
                encoding="utf-8",
            )
            config = MutationConfig.from_dict(load_config(config_path))

            assert config.copies == 3
            assert config.mode is Mode.CHARACTER
            assert config.special_words == ("let", ";")
            assert config.chances == {"truncate": 0.05}

    def test_invalid_values(self):
        """잘못된 값은 ConfigError"""
        from core.config import ConfigError, MutationConfig

        with tempfile.TemporaryDirectory() as tmp:
            bad_configs = [
                {"output_dir": os.path.join(tmp, "missing")},
                {"output_dir": tmp, "copies": -1},
                {"output_dir": tmp, "mode": "nibble"},
                {"output_dir": tmp, "chances": {"truncate": 1.5}},
                {"output_dir": tmp, "chances": {"explode": 0.5}},
                {"output_dir": tmp, "special_words": [""]},
                {"output_dir": tmp, "workers": 0},
                {"output_dir": tmp, "splice": "false"},
                {"output_dir": tmp, "exclude_self": "yes"},
            ]
            for bad in bad_configs:
                try:
                    MutationConfig.from_dict(bad)
                except ConfigError:
                    continue
                raise AssertionError(f"ConfigError expected for {bad}")

    def test_unknown_yaml_key(self):
        from core.config import ConfigError, load_config

        with tempfile.TemporaryDirectory() as tmp:
            config_path = os.path.join(tmp, "config.yaml")
            Path(config_path).write_text("colour: blue\n", encoding="utf-8")
            try:
                load_config(config_path)
            except ConfigError:
                return
        raise AssertionError("ConfigError expected")


class TestDiscovery:
    """입력 파일 수집 테스트"""

    def test_collect_files(self):
        from core.discovery import collect_files

        with tempfile.TemporaryDirectory() as tmp:
            make_files(tmp, {"a.txt": b"a", "README": b"r", "sub/b.rs": b"b", "sub/deep/c.py": b"c"})

            files = collect_files(tmp)
            names = [os.path.relpath(f, tmp) for f in files]

            assert names == ["a.txt", os.path.join("sub", "b.rs"), os.path.join("sub", "deep", "c.py")]
            assert all(os.path.isabs(f) for f in files)

    def test_max_depth(self):
        """깊이 1 이면 하위 폴더 제외"""
        from core.discovery import collect_files

        with tempfile.TemporaryDirectory() as tmp:
            make_files(tmp, {"a.txt": b"a", "sub/b.txt": b"b"})
            files = collect_files(tmp, max_depth=1)

            assert [os.path.basename(f) for f in files] == ["a.txt"]

    def test_single_file_and_missing_path(self):
        from core.discovery import collect_files

        with tempfile.TemporaryDirectory() as tmp:
            (path,) = make_files(tmp, {"x.bin": b"x"})
            assert collect_files(path) == [os.path.abspath(path)]

            try:
                collect_files(os.path.join(tmp, "nope"))
            except FileNotFoundError:
                return
        raise AssertionError("FileNotFoundError expected")


class TestScheduler:
    """스케줄러 테스트"""

    def _config(self, output_dir, **kwargs):
        from core.config import MutationConfig

        return MutationConfig(output_dir=output_dir, **kwargs)

    def test_zero_copies(self):
        """복사본 0 개면 출력도 에러도 없음"""
        from core.scheduler import FanOutScheduler

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            files = make_files(src, {"a.txt": b"hello", "b.txt": b"world"})
            run_report = FanOutScheduler(self._config(out, copies=0), files).run()

            assert os.listdir(out) == []
            assert run_report.errors == 0
            assert run_report.file_states()["DONE"] == 2

    def test_variants_unique_and_keep_extension(self):
        """모든 출력 경로가 유일하고 확장자가 원본과 같음"""
        from core.scheduler import FanOutScheduler

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            files = make_files(src, {"a.txt": b"a" * 100, "b.json": b"{}" * 50, "c.tar.gz": bytes(300)})
            scheduler = FanOutScheduler(self._config(out, copies=20, workers=4), files)
            run_report = scheduler.run()

            written = run_report.written_paths
            assert len(written) == len(set(written))
            assert sorted(os.listdir(out)) == sorted(os.path.basename(p) for p in written)

            for file_report in run_report.files:
                _, ext = os.path.basename(file_report.path).rsplit(".", 1)
                assert len(file_report.outcomes) == 20
                for path in file_report.written:
                    assert path.endswith("." + ext)

            assert scheduler.progress.value == 3

    def test_skips_and_errors(self):
        """확장자 없음/읽기 실패 파일은 건너뛰고 나머지는 처리"""
        from core.config import Mode
        from core.scheduler import FanOutScheduler

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            files = make_files(src, {"good.txt": b"fine text", "bad.txt": b"\xff\xfe\xfd", "Makefile": b"all:"})
            config = self._config(out, copies=2, mode=Mode.CHARACTER, chances=KEEP_ALL)
            run_report = FanOutScheduler(config, files).run()

            states = {os.path.basename(f.path): f.state.name for f in run_report.files}
            assert states == {"good.txt": "DONE", "bad.txt": "SKIPPED_READ_ERROR", "Makefile": "SKIPPED_NO_EXTENSION"}
            assert run_report.errors == 2
            assert len(os.listdir(out)) == 2

    def test_write_failure_keeps_going(self):
        """쓰기 실패는 복사본 단위로만 처리"""
        from core.scheduler import FanOutScheduler

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            files = make_files(src, {"a.txt": b"abc"})
            target = os.path.join(out, "gone")
            os.mkdir(target)
            scheduler = FanOutScheduler(self._config(target, copies=3, chances=KEEP_ALL), files)
            os.rmdir(target)

            run_report = scheduler.run()

            assert run_report.copy_outcomes()["SKIPPED_WRITE_ERROR"] == 3
            assert run_report.files[0].state.name == "DONE"

    def test_single_byte_source(self):
        """1바이트 원본은 빈 결과로 포기하거나 1바이트 이하만 저장"""
        from core.scheduler import FanOutScheduler

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            files = make_files(src, {"one.bin": b"Q"})
            run_report = FanOutScheduler(self._config(out, copies=50), files).run()

            outcomes = run_report.copy_outcomes()
            assert outcomes["WRITTEN"] + outcomes["ABORTED_EMPTY"] == 50
            for path in run_report.written_paths:
                assert len(Path(path).read_bytes()) <= 1

    def test_summary_reports_mutation_stats(self):
        """최종 리포트에 연산자별 적용 횟수 포함"""
        from core.scheduler import FanOutScheduler

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            files = make_files(src, {"a.bin": bytes(range(50))})
            config = self._config(out, copies=50, chances={"truncate": 1.0, "delete": 1.0})
            run_report = FanOutScheduler(config, files).run()

            assert run_report.mutation_stats["truncate"] == 50
            assert run_report.mutation_stats["aborted"] == run_report.copy_outcomes()["ABORTED_EMPTY"]

            buffer = io.StringIO()
            with contextlib.redirect_stdout(buffer):
                run_report.print_summary()
            summary = buffer.getvalue()

            assert "Mutations applied" in summary
            assert "truncate:" in summary
            assert "delete:" in summary

    def test_seeded_runs_are_reproducible(self):
        """같은 시드 + 스플라이스 없음 → 접미사 외에는 같은 결과"""
        from core.scheduler import FanOutScheduler

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out1, tempfile.TemporaryDirectory() as out2:
            files = make_files(src, {"a.txt": bytes(range(256)) * 4, "b.csv": b"x,y\n1,2\n" * 30})

            results = []
            for out in (out1, out2):
                run_report = FanOutScheduler(self._config(out, copies=10, seed=1234), files).run()
                results.append({variant_key(p): Path(p).read_bytes() for p in run_report.written_paths})

            assert results[0] == results[1]
            assert results[0]


class TestController:
    """명령행 실행 테스트"""

    def test_missing_input(self):
        from core.controller import main

        with tempfile.TemporaryDirectory() as out:
            assert main(["-i", os.path.join(out, "none"), "-o", out, "-n", "1"]) == 1

    def test_missing_output(self):
        from core.controller import main

        with tempfile.TemporaryDirectory() as src:
            make_files(src, {"a.txt": b"abc"})
            assert main(["-i", src, "-o", os.path.join(src, "nope"), "-n", "1"]) == 1

    def test_invalid_max_depth(self):
        from core.controller import main

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            make_files(src, {"a.txt": b"abc"})
            assert main(["-i", src, "-o", out, "-n", "1", "--max-depth", "0"]) == 1
            assert main(["-i", src, "-o", out, "-n", "1", "--max-depth", "-3"]) == 1
            assert os.listdir(out) == []

    def test_character_mode_value(self):
        """-c, -c true, -c false 모두 허용"""
        from core.controller import build_parser

        parser = build_parser()
        assert parser.parse_args(["-i", "x"]).character_mode is None
        assert parser.parse_args(["-i", "x", "-c"]).character_mode is True
        assert parser.parse_args(["-i", "x", "-c", "true"]).character_mode is True
        assert parser.parse_args(["-i", "x", "-c", "false"]).character_mode is False
        assert parser.parse_args(["-i", "x", "-c", "-s", "let"]).character_mode is True

    def test_character_mode_false_overrides_config(self):
        """-c false 는 설정 파일의 문자 모드보다 우선"""
        from core.config import Mode
        from core.controller import BrokenFilesController, build_parser

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            make_files(src, {"a.bin": b"\xff\xfe" * 20})
            config_path = os.path.join(out, "config.yaml")
            with open(config_path, "w", encoding="utf-8") as f:
                f.write("mode: character\n")

            parser = build_parser()
            args = parser.parse_args(["-i", src, "-o", out, "--config", config_path, "-c", "false"])
            assert BrokenFilesController.from_args(args).config.mode is Mode.BYTE

            args = parser.parse_args(["-i", src, "-o", out, "--config", config_path])
            assert BrokenFilesController.from_args(args).config.mode is Mode.CHARACTER

    def test_no_files(self):
        from core.controller import main

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            make_files(src, {"LICENSE": b"MIT"})
            assert main(["-i", src, "-o", out, "-n", "1"]) == 1

    def test_run(self):
        """문자 모드 + 특수 단어 + 스플라이스 전체 실행"""
        from core.controller import main

        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as out:
            make_files(src, {"a.js": b"let a = 1;\n" * 20, "b.js": b"const b = () => 2;\n" * 20})
            code = main(
                ["-i", src, "-o", out, "-n", "5", "-c", "-s", "let", "=>", ";", "--splice", "--seed", "7"]
            )

            assert code == 0
            for name in os.listdir(out):
                assert name.endswith(".js")
                Path(out, name).read_bytes().decode("utf-8")


def run_all_tests():
    """모든 테스트 실행"""
    test_classes = [
        TestNamer,
        TestConfig,
        TestDiscovery,
        TestScheduler,
        TestController,
    ]

    total = 0
    passed = 0
    failed = 0

    for test_class in test_classes:
        print(f"\n[+] Running {test_class.__name__}...")
        instance = test_class()

        for method_name in dir(instance):
            if method_name.startswith("test_"):
                total += 1
                try:
                    getattr(instance, method_name)()
                    print(f"  ✓ {method_name}")
                    passed += 1
                except Exception as e:
                    print(f"  ✗ {method_name}: {e}")
                    failed += 1

    print(f"\n{'='*50}")
    print(f"Results: {passed}/{total} passed, {failed} failed")

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
