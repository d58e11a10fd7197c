import datetime
import os
import time

from airband.helpers import (
    dir_exists,
    file_exists,
    make_dated_subdirs,
    make_dir,
    make_subdirs,
)


def _create_file(path):
    with open(path, "wb"):
        pass
    assert file_exists(path)


def test_dir_exists_true(tmp_path):
    assert dir_exists(str(tmp_path))


def test_dir_exists_false():
    assert not dir_exists("/not/a/real/dir")


def test_dir_exists_not_dir(tmp_path):
    path = str(tmp_path) + "/some_file"
    _create_file(path)
    assert not dir_exists(path)


def test_file_exists_true(tmp_path):
    path = str(tmp_path) + "/some_file"
    _create_file(path)
    assert file_exists(path)


def test_file_exists_false(tmp_path):
    assert not file_exists(str(tmp_path) + "/nothing")


def test_file_exists_not_file(tmp_path):
    assert not file_exists(str(tmp_path))
    assert dir_exists(str(tmp_path))


def test_make_dir_normal(tmp_path):
    path = str(tmp_path) + "/a"
    assert not dir_exists(path)
    assert make_dir(path)
    assert dir_exists(path)


def test_make_dir_exists(tmp_path):
    assert dir_exists(str(tmp_path))
    assert make_dir(str(tmp_path))
    assert dir_exists(str(tmp_path))


def test_make_dir_empty():
    assert not make_dir("")


def test_make_dir_fail():
    assert not make_dir("/this/path/does/not/exist")


def test_make_dir_file_in_the_way(tmp_path):
    path = str(tmp_path) + "/some_file"
    _create_file(path)
    assert not make_dir(path)


def test_make_subdirs_exists(tmp_path):
    assert make_subdirs(str(tmp_path), "")
    assert dir_exists(str(tmp_path))


def test_make_subdirs_one_subdir(tmp_path):
    base = str(tmp_path)
    assert not dir_exists(base + "/bob")
    assert make_subdirs(base, "bob")
    assert dir_exists(base + "/bob")


def test_make_subdirs_multiple_subdir(tmp_path):
    base = str(tmp_path)
    assert not dir_exists(base + "/bob/joe/sam")
    assert make_subdirs(base, "bob/joe/sam")
    assert dir_exists(base + "/bob/joe/sam")


def test_make_subdirs_file_in_the_way(tmp_path):
    base = str(tmp_path)
    path = base + "/some_file"
    _create_file(path)
    assert not make_subdirs(base, "some_file/some_dir")
    assert not dir_exists(path)
    assert file_exists(path)


def test_make_subdirs_create_base(tmp_path):
    base = str(tmp_path)
    assert not dir_exists(base + "/base_dir/a")
    assert make_subdirs(base + "/base_dir", "a")
    assert dir_exists(base + "/base_dir/a")


def test_make_subdirs_extra_slashes(tmp_path):
    base = str(tmp_path)
    assert not dir_exists(base + "/a/b/c/d")
    assert make_subdirs(base, "///a/b////c///d")
    assert dir_exists(base + "/a/b/c/d")


def test_make_dated_subdirs_normal(tmp_path):
    base = str(tmp_path)
    expected = base + "/2010/03/07"
    assert not dir_exists(expected)
    assert make_dated_subdirs(base, datetime.date(2010, 3, 7)) == expected
    assert dir_exists(expected)


def test_make_dated_subdirs_struct_time(tmp_path):
    base = str(tmp_path)
    moment = time.strptime("2010-3-7", "%Y-%m-%d")
    assert make_dated_subdirs(base, moment) == base + "/2010/03/07"
    assert os.path.isdir(base + "/2010/03/07")


def test_make_dated_subdirs_fail():
    assert make_dated_subdirs("/invalid/base/dir", datetime.date(2010, 3, 7)) == ""


def test_make_dated_subdirs_some_exist(tmp_path):
    base = str(tmp_path)
    through_month = base + "/2010/03/"
    assert make_dated_subdirs(base, datetime.datetime(2010, 3, 7)) == through_month + "07"
    assert dir_exists(through_month)
    assert not dir_exists(through_month + "08")
    assert make_dated_subdirs(base, datetime.datetime(2010, 3, 8)) == through_month + "08"
    assert dir_exists(through_month + "08")