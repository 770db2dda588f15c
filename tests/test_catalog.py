# tests/test_catalog.py - Tests for the syscall catalog
"""
Unit tests for SyscallDescriptor, SyscallCatalog and catalog loading.
"""

import pytest
from ebpfgen.catalog.syscalls import (
    ArgMask, SyscallCatalog, SyscallDescriptor, builtin_catalog, load_catalog,
)
from ebpfgen.errors import ConfigError


class TestSyscallDescriptor:
    """Test cases for SyscallDescriptor"""

    def test_from_mask_derives_positions(self):
        """Test that string slots follow the STR_n bits"""
        renameat = SyscallDescriptor.from_mask(
            264, 'renameat', ArgMask.FD_1 | ArgMask.STR_2 | ArgMask.FD_2 | ArgMask.STR_4)

        assert renameat.string_arg_count == 2
        assert renameat.string_arg_positions == (1, 3)
        assert renameat.available

    def test_count_must_match_positions(self):
        """Test that inconsistent descriptors are rejected"""
        with pytest.raises(ConfigError):
            SyscallDescriptor(number=1, name='bad', string_arg_count=2, string_arg_positions=(0,))

    def test_matches(self):
        """Test capability filtering"""
        read = SyscallDescriptor.from_mask(0, 'read', ArgMask.FD_1)

        assert read.matches(0)
        assert read.matches(ArgMask.FD_1 | ArgMask.STR_1)
        assert not read.matches(ArgMask.STR_1)


class TestSyscallCatalog:
    """Test cases for SyscallCatalog"""

    def test_iterates_by_number(self, catalog):
        """Test ascending iteration regardless of insertion order"""
        numbers = [d.number for d in catalog]
        assert numbers == sorted(numbers)
        assert numbers[-1] == 257

    def test_lookup(self, catalog):
        """Test lookup by number and by name"""
        assert catalog[257].name == 'openat'
        assert 82 in catalog
        assert catalog.get_by_name('mount').number == 165
        assert catalog.get_by_name('nope') is None

    def test_duplicate_number(self):
        """Test that numbers are unique"""
        with pytest.raises(ConfigError):
            SyscallCatalog([
                SyscallDescriptor.from_mask(1, 'a'),
                SyscallDescriptor.from_mask(1, 'b'),
            ])

    def test_select_skips_unavailable(self, catalog):
        """Test that selection skips unavailable syscalls"""
        names = [d.name for d in catalog.select(ArgMask.STR_1)]
        assert names == ['open', 'rename', 'mount']

    def test_builtin_catalog(self):
        """Test the built-in table"""
        catalog = builtin_catalog()

        assert len(catalog) > 50
        assert catalog.get_by_name('openat').string_arg_positions == (1,)
        assert catalog.get_by_name('mount').string_arg_count == 3
        assert catalog.get_by_name('clone').number == 56


class TestLoadCatalog:
    """Test cases for YAML catalogs"""

    def test_load(self, tmp_path):
        """Test loading masks, positions and availability"""
        path = tmp_path / 'syscalls.yaml'
        path.write_text(
            "- number: 257\n"
            "  name: openat\n"
            "  mask: [fd_1, str_2]\n"
            "- number: 500\n"
            "  name: fancy\n"
            "  positions: [0, 1, 2, 3]\n"
            "  available: false\n"
            "- number: 9\n"
            "  name: mmap\n"
        )

        catalog = load_catalog(str(path))

        assert [d.number for d in catalog] == [9, 257, 500]
        assert catalog[257].string_arg_positions == (1,)
        assert catalog[257].mask == ArgMask.FD_1 | ArgMask.STR_2
        assert catalog[500].string_arg_count == 4
        assert not catalog[500].available
        assert catalog[9].string_arg_count == 0

    def test_unknown_flag(self, tmp_path):
        """Test that unknown mask flags are rejected"""
        path = tmp_path / 'syscalls.yaml'
        path.write_text("- {number: 1, name: x, mask: [str_9]}\n")
        with pytest.raises(ConfigError):
            load_catalog(str(path))

    def test_not_a_list(self, tmp_path):
        """Test that the top level must be a list"""
        path = tmp_path / 'syscalls.yaml'
        path.write_text("number: 1\n")
        with pytest.raises(ConfigError):
            load_catalog(str(path))

    def test_missing_file(self, tmp_path):
        """Test that an unreadable catalog is a config error"""
        with pytest.raises(ConfigError):
            load_catalog(str(tmp_path / 'missing.yaml'))

    @pytest.mark.parametrize("positions", ["[x]", "[7]"])
    def test_invalid_positions(self, tmp_path, positions):
        """Test that bad string positions are config errors"""
        path = tmp_path / 'syscalls.yaml'
        path.write_text(f"- {{number: 1, name: x, positions: {positions}}}\n")
        with pytest.raises(ConfigError):
            load_catalog(str(path))

    def test_single_flag_mask(self, tmp_path):
        """Test that a mask can name one flag without a list"""
        path = tmp_path / 'syscalls.yaml'
        path.write_text("- {number: 3, name: close, mask: fd_1}\n")

        catalog = load_catalog(str(path))

        assert catalog[3].mask == ArgMask.FD_1
        assert catalog[3].string_arg_count == 0
