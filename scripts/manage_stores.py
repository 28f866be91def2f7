"""
Gemini File Search Store 관리 스크립트

기능:
  1. Store 목록 및 문서 수/용량 출력
  2. 특정 Store의 문서 목록 출력
  3. display_name으로 Store 조회 또는 생성
  4. 파일/디렉토리 업로드 (인덱싱 완료까지 대기)
  5. Store 삭제 (문서 포함)

사용법:
  .venv/bin/python scripts/manage_stores.py --list
  .venv/bin/python scripts/manage_stores.py --docs <store_id>
  .venv/bin/python scripts/manage_stores.py --ensure "사내규정"
  .venv/bin/python scripts/manage_stores.py --upload ./docs --store <store_id>
  .venv/bin/python scripts/manage_stores.py --delete <store_id>
"""
import sys
import os
import argparse

# 프로젝트 루트를 경로에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pathlib import Path
from core import store_manager
from core.document_uploader import upload_directory, upload_file
from core.errors import FileSearchError
from core.resource_names import format_bytes, total_document_count


def _all_stores() -> list[dict]:
    stores = []
    token = None
    while True:
        page = store_manager.list_stores(page_size=20, page_token=token)
        stores.extend(page["stores"])
        token = page["next_page_token"]
        if not token:
            return stores


def cmd_list():
    """Store 목록 출력"""
    print("=" * 60)
    print("📋 Gemini File Search Store 목록")
    print("=" * 60)

    stores = _all_stores()
    for store in stores:
        print(f"\n📦 {store['display_name']} ({store['name']})")
        print(
            f"   문서: {total_document_count(store)}개 "
            f"(active {store['active_documents_count']}, "
            f"pending {store['pending_documents_count']}, "
            f"failed {store['failed_documents_count']})"
        )
        print(f"   용량: {format_bytes(store['size_bytes'])}")

    if not stores:
        print("📭 Store가 없습니다.")


def cmd_docs(store_id: str):
    """Store 문서 목록 출력"""
    token = None
    count = 0
    print(f"📦 {store_id}")
    while True:
        page = store_manager.list_documents(store_id, page_size=20, page_token=token)
        for doc in page["documents"]:
            count += 1
            print(f"   └─ {doc['display_name']} [{doc['state']}] {format_bytes(doc['size_bytes'])}")
        token = page["next_page_token"]
        if not token:
            break
    print(f"\n총 문서 수: {count}개")


def cmd_upload(path: str, store_id: str):
    """파일 또는 디렉토리 업로드"""
    target = Path(path)
    results = upload_directory(target, store_id) if target.is_dir() else [upload_file(target, store_id)]
    for r in results:
        mark = "✅" if r["success"] else "⚠️"
        print(f"  {mark} {r['file']}" + (f": {r['error']}" if r["error"] else ""))
    success_count = sum(1 for r in results if r["success"])
    print(f"\n📊 {success_count}/{len(results)}개 파일 업로드 완료")
    return success_count == len(results)


def main():
    parser = argparse.ArgumentParser(description="Gemini File Search Store 관리")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--list", action="store_true", help="Store 목록 출력")
    group.add_argument("--docs", metavar="STORE", help="Store 문서 목록 출력")
    group.add_argument("--ensure", metavar="DISPLAY_NAME", help="Store 조회 또는 생성")
    group.add_argument("--upload", metavar="PATH", help="파일/디렉토리 업로드 (--store 필요)")
    group.add_argument("--delete", metavar="STORE", help="Store 삭제 (문서 포함)")
    parser.add_argument("--store", help="업로드 대상 Store")

    args = parser.parse_args()

    try:
        if args.list:
            cmd_list()
        elif args.docs:
            cmd_docs(args.docs)
        elif args.ensure:
            print(f"📦 {store_manager.get_or_create_store(args.ensure)}")
        elif args.upload:
            if not args.store:
                parser.error("--upload에는 --store가 필요합니다")
            if not cmd_upload(args.upload, args.store):
                return 1
        elif args.delete:
            store_manager.delete_store(args.delete, force=True)
            print(f"🗑️ 삭제 완료: {args.delete}")
    except FileSearchError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
