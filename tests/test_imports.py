"""Tests for import resolution."""

from hookgen.imports import (
    WorkspaceSymbolIndex,
    imported_symbols,
    matches_symbol,
    relative_import_path,
    resolve_imports,
)

TARGET = "/proj/src/api/users.ts"

ACCESSOR = """export const getUser = async (
  context: QueryFunctionContext<ReturnType<typeof getUserKey.keys>>
): Promise<WithResponse<GetUserResponse>> => {
  const { CancelToken } = axios;
  const response: AxiosResponse<WithResponse<GetUserResponse>> =
    await getInstance().get(`/v1/user`);
  return response.data;
};"""


class TestHelpers:
    """Test symbol matching and module specifiers."""

    def test_word_boundary(self):
        assert matches_symbol("useQuery(", "useQuery")
        assert not matches_symbol("useQueryClient()", "useQuery")
        assert not matches_symbol("$axios.get()", "axios")

    def test_imported_symbols(self):
        existing = (
            "import axios, { AxiosResponse } from 'axios';\n"
            'import {\n  useQuery,\n  useMutation as useMut\n} from "@tanstack/react-query";\n'
            "const x = useInfiniteQuery;\n"
        )
        names = imported_symbols(existing)
        assert {"axios", "AxiosResponse", "useQuery", "useMutation"} <= names
        assert "useInfiniteQuery" not in names

    def test_relative_sibling_directory(self):
        assert relative_import_path(TARGET, "/proj/src/lib/http.ts") == "../lib/http"

    def test_relative_same_directory(self):
        assert relative_import_path(TARGET, "/proj/src/api/types.tsx") == "./types"

    def test_declaration_file_extension(self):
        assert relative_import_path(TARGET, "/proj/src/types/api.d.ts") == "../types/api"


class TestLibraryImports:
    """Test imports from the fixed library table."""

    def test_grouped_by_module(self):
        statements = resolve_imports(ACCESSOR, TARGET)
        assert statements == [
            "import { QueryFunctionContext } from '@tanstack/react-query';",
            "import axios, { AxiosResponse } from 'axios';",
        ]

    def test_named_symbols_merged(self):
        content = "useQuery(a); useInfiniteQuery(b); const o: UseQueryOptions = {};"
        assert resolve_imports(content, TARGET) == [
            "import { useQuery, useInfiniteQuery, UseQueryOptions } from '@tanstack/react-query';",
        ]

    def test_default_only(self):
        assert resolve_imports("axios.get('/x')", TARGET) == ["import axios from 'axios';"]

    def test_already_imported_skipped(self):
        existing = "import { QueryFunctionContext } from '@tanstack/react-query';\n"
        statements = resolve_imports(ACCESSOR, TARGET, existing)
        assert statements == ["import axios, { AxiosResponse } from 'axios';"]


class TestProjectImports:
    """Test project symbols located through the symbol index."""

    def test_resolved_relative(self, symbol_index):
        statements = resolve_imports(ACCESSOR, TARGET, index=symbol_index)
        assert "import { getInstance } from '../lib/http';" in statements
        assert "import { WithResponse } from '../types/api';" in statements

    def test_libraries_first(self, symbol_index):
        statements = resolve_imports(ACCESSOR, TARGET, index=symbol_index)
        assert statements[0].endswith("from '@tanstack/react-query';")
        assert statements[1].endswith("from 'axios';")

    def test_unreferenced_symbols_not_looked_up(self, symbol_index):
        resolve_imports("const x = 1;", TARGET, index=symbol_index)
        assert symbol_index.queries == []

    def test_dependency_and_kind_filtered(self, symbol_index):
        """node_modules locations and disallowed kinds are never imported."""
        content = "getInstance(); showSnackbarOnApiError(e);"
        statements = resolve_imports(content, TARGET, index=symbol_index)
        assert statements == ["import { getInstance } from '../lib/http';"]

    def test_missing_symbol_omitted(self, symbol_index):
        content = "const invalidate = useInvalidateCommonQueries(); WithCustomRecordResponse;"
        statements = resolve_imports(content, TARGET, index=symbol_index)
        assert statements == ["import { useInvalidateCommonQueries } from '../hooks/common';"]

    def test_no_self_import(self, symbol_index):
        assert resolve_imports("getInstance()", "/proj/src/lib/http.ts", index=symbol_index) == []

    def test_existing_import_skipped(self, symbol_index):
        existing = "import { getInstance } from '@/lib/http';\n"
        statements = resolve_imports("getInstance()", TARGET, existing, index=symbol_index)
        assert statements == []

    def test_no_index(self):
        assert resolve_imports("getInstance()", TARGET) == []


class TestKnownLocations:
    """Test generated type names located without the index."""

    def test_generated_types(self, symbol_index):
        statements = resolve_imports(
            ACCESSOR, TARGET, index=symbol_index,
            known_locations={"GetUserResponse": "/proj/src/types/user.ts"},
        )
        assert "import { GetUserResponse } from '../types/user';" in statements

    def test_overrides_index(self, symbol_index):
        statements = resolve_imports(
            "getInstance()", TARGET, index=symbol_index,
            known_locations={"getInstance": "/proj/src/api/client.ts"},
        )
        assert statements == ["import { getInstance } from './client';"]

    def test_same_file_skipped(self):
        statements = resolve_imports(
            "GetUserResponse", TARGET, known_locations={"GetUserResponse": TARGET},
        )
        assert statements == []

    def test_unreferenced_name_skipped(self):
        statements = resolve_imports(
            "getUser()", TARGET, known_locations={"GetUserResponse": "/proj/src/types/user.ts"},
        )
        assert statements == []


class TestWorkspaceSymbolIndex:
    """Test the filesystem symbol index."""

    def _write(self, root, relative, text):
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def test_declaration_kinds(self, tmp_path):
        path = self._write(tmp_path, "src/lib/http.ts", (
            "export const getInstance = () => axios.create();\n"
            "export function helper() {}\n"
            "export interface WithResponse<T> { success: boolean; data: T }\n"
            "export type Id = string;\n"
            "export const enum Color { Red }\n"
            "export let counter = 0;\n"
            "export default class Client {}\n"
        ))
        index = WorkspaceSymbolIndex(tmp_path)
        kinds = {name: index.lookup(name)[0].kind for name in
                 ("getInstance", "helper", "WithResponse", "Id", "Color", "counter", "Client")}
        assert kinds == {
            "getInstance": "constant",
            "helper": "function",
            "WithResponse": "interface",
            "Id": "class",
            "Color": "class",
            "counter": "variable",
            "Client": "class",
        }
        assert index.lookup("getInstance")[0].path == str(path)

    def test_skips_dependency_directories(self, tmp_path):
        self._write(tmp_path, "node_modules/http/index.d.ts", "export declare function getInstance(): any;\n")
        self._write(tmp_path, "src/http.ts", "export function getInstance() {}\n")
        locations = WorkspaceSymbolIndex(tmp_path).lookup("getInstance")
        assert len(locations) == 1
        assert "node_modules" not in locations[0].path

    def test_ignores_non_scripts_and_locals(self, tmp_path):
        self._write(tmp_path, "README.md", "export const getInstance = 1;\n")
        self._write(tmp_path, "src/a.ts", "const getInstance = 1;\n")
        assert WorkspaceSymbolIndex(tmp_path).lookup("getInstance") == []

    def test_end_to_end_resolution(self, tmp_path):
        self._write(tmp_path, "src/lib/http.ts", "export const getInstance = () => null;\n")
        target = tmp_path / "src" / "api" / "users.ts"
        statements = resolve_imports("getInstance()", str(target), index=WorkspaceSymbolIndex(tmp_path))
        assert statements == ["import { getInstance } from '../lib/http';"]
