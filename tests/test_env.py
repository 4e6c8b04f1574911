from turboshell.env import Environment, EnvVar, history_file_path, parse_env_entry


def test_parse_entry_with_value():
    var = parse_env_entry("PATH=/bin:/usr/bin")
    assert var == EnvVar("PATH", "/bin:/usr/bin", True, True)


def test_parse_entry_without_separator():
    var = parse_env_entry("FLAG")
    assert var.key == "FLAG"
    assert var.value == ""
    assert not var.has_separator
    assert not var.is_set


def test_parse_entry_keeps_later_equals_in_value():
    var = parse_env_entry("A=b=c")
    assert (var.key, var.value) == ("A", "b=c")


def test_parse_entry_empty_value_has_separator():
    var = parse_env_entry("EMPTY=")
    assert var.value == ""
    assert var.has_separator and var.is_set


def test_get_and_get_var():
    env = Environment(["HOME=/home/user", "SHELL=tsh"])
    assert env.get("HOME") == "/home/user"
    assert env.get_var("SHELL").value == "tsh"
    assert env.get("MISSING") is None
    assert env.get_var("MISSING") is None


def test_first_duplicate_wins():
    env = Environment(["A=1", "A=2"])
    assert env.get("A") == "1"
    assert len(env) == 2


def test_add_appends_duplicates():
    env = Environment(["A=1"])
    env.add("A=2")
    assert env.to_list() == ["A=1", "A=2"]


def test_export_replaces_value_when_separator_given():
    env = Environment(["A=1", "B=2"])
    env.export("A=new")
    assert env.to_list() == ["A=new", "B=2"]


def test_export_without_separator_keeps_existing():
    env = Environment(["A=1"])
    env.export("A")
    assert env.get("A") == "1"
    assert env.get_var("A").has_separator


def test_export_new_variable_is_appended():
    env = Environment(["A=1"])
    env.export("NAME")
    env.export("C=3")
    assert env.to_list() == ["A=1", "NAME", "C=3"]
    assert not env.get_var("NAME").is_set


def test_export_sets_previously_valueless_variable():
    env = Environment(["NAME"])
    env.export("NAME=value")
    var = env.get_var("NAME")
    assert var.value == "value"
    assert var.has_separator and var.is_set


def test_unset():
    env = Environment(["A=1", "B=2"])
    assert env.unset("A") is True
    assert env.get("A") is None
    assert env.unset("A") is False
    assert env.to_list() == ["B=2"]


def test_to_list_round_trip():
    entries = ["A=1", "B=", "C=x=y"]
    assert Environment(entries).to_list() == entries


def test_iteration_keeps_order():
    env = Environment(["Z=1", "A=2", "M=3"])
    assert [var.key for var in env] == ["Z", "A", "M"]


def test_sorted_vars_are_sorted_copies():
    env = Environment(["Z=1", "A=2", "M=3", "a=4"])
    result = env.sorted_vars()
    keys = [var.key for var in result]
    assert keys == sorted(keys)
    result[0].value = "changed"
    assert env.get(result[0].key) != "changed"
    assert [var.key for var in env] == ["Z", "A", "M", "a"]


def test_history_file_path_uses_home():
    env = Environment(["HOME=/home/user"])
    assert history_file_path(env, "./minishell") == "/home/user/tsh_history"


def test_history_file_path_without_home_uses_program_directory():
    assert history_file_path(Environment([]), "/opt/tools/minishell") == "/opt/tools//tsh_history"